"""
Wrappers around the external command-line tools the pipeline drives.

Each adapter runs its executable with subprocess and reports exit
status through CommandResult instead of raising.
"""

from .base import CommandAdapter
from .ddn_adapter import DDNAdapter
from .git_adapter import GitAdapter

__all__ = ["CommandAdapter", "DDNAdapter", "GitAdapter"]
