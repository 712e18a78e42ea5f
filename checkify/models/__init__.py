from .enums import SubscriptionTier, TierSource
from .notion_database import NotionDatabase
from .todo_list import TodoList
from .user_profile import UserProfile

__all__ = [
    "SubscriptionTier",
    "TierSource",
    "NotionDatabase",
    "TodoList",
    "UserProfile",
]
