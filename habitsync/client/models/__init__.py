from .base import LocalBase
from .habit import LocalCompletion, LocalHabit, LocalMoodEntry
from .outbox import OutboxOp

__all__ = [
    "LocalBase",
    "LocalHabit",
    "LocalCompletion",
    "LocalMoodEntry",
    "OutboxOp",
]
