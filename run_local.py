from habitsync.logging_utils import configure_logging
from habitsync.main import create_app
from habitsync.settings import settings

configure_logging()
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "run_local:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=False,
    )
