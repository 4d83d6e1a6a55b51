"""Duplicate detection across one run.

The deduplication index remembers every Message-ID seen so far; the
duplicate log records each repeat in a tab separated audit file.
"""

from .dedup import DeduplicationIndex
from .dupes_log import DuplicateLog

__all__ = ["DeduplicationIndex", "DuplicateLog"]
