"""
Statements Package

Statement-period assignment and receipt file organization.
"""

from .assigner import StatementAssigner, find_statement
from .organizer import FileMover, FileOrganizer, LocalFileMover, PathOrganizer

__all__ = [
    "FileMover",
    "FileOrganizer",
    "LocalFileMover",
    "PathOrganizer",
    "StatementAssigner",
    "find_statement",
]
