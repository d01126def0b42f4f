from .user import User
from .entry import Entry, EntryType
from .reaction import Reaction
from .comment import Comment

__all__ = [
    "User",
    "Entry",
    "EntryType",
    "Reaction",
    "Comment",
]
