from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from habitsync.api.routers.checkins import router as checkins_router
from habitsync.api.routers.habits import router as habits_router
from habitsync.api.routers.insights import router as insights_router
from habitsync.api.routers.sync import router as sync_router
from habitsync.errors import (
    HabitSyncError,
    habitsync_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)


def create_app() -> FastAPI:
    app = FastAPI(title="Habit Sync API")

    app.add_exception_handler(HabitSyncError, habitsync_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(sync_router)
    app.include_router(habits_router)
    app.include_router(checkins_router)
    app.include_router(insights_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
