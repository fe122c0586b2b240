from .base import Base
from .user import User
from .habit import Habit, HabitCompletion, MoodEntry
from .sync import SyncOp

__all__ = [
    "Base",
    "User",
    "Habit",
    "HabitCompletion",
    "MoodEntry",
    "SyncOp",
]
