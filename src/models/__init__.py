from .base import Base
from .state_entry import StateEntryModel

__all__ = ["Base", "StateEntryModel"]
