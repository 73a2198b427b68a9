from .user_repository import UserRepository, load_preference_snapshots
from .reading_list_repository import ReadingListRepository

__all__ = ["UserRepository", "ReadingListRepository", "load_preference_snapshots"]
