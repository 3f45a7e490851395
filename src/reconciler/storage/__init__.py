"""
Storage Package

Repository protocol for the persistence collaborator, with an in-memory
implementation and a JSON-file implementation used by the CLI.
"""

from .json_repository import JsonRepository
from .repository import InMemoryRepository, Repository

__all__ = [
    "InMemoryRepository",
    "JsonRepository",
    "Repository",
]
