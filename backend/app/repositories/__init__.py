from .base import BaseRepository
from .policy_repository import PolicyDocumentRepository

__all__ = [
    "BaseRepository",
    "PolicyDocumentRepository",
]
