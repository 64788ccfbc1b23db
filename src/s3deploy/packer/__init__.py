"""
Archive packaging for the single-object upload mode.
"""

from .archive import ArchivePackager, archive_entry_name

__all__ = ["ArchivePackager", "archive_entry_name"]
