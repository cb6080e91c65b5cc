"""
Git adapter - inspects the working tree the pipeline will be pushed from.
"""

import logging
from typing import List, Optional

from .base import CommandAdapter

logger = logging.getLogger(__name__)


class GitAdapter(CommandAdapter):
    """Wraps the `git` executable for read-only working tree queries."""

    def __init__(self, executable: str = "git", **kwargs):
        kwargs.setdefault("timeout", 60)
        super().__init__(executable, **kwargs)

    def is_repository(self) -> bool:
        return self.run(["rev-parse", "--git-dir"]).ok

    def remotes(self) -> List[str]:
        """Return `git remote -v` lines, e.g. 'origin  https://... (fetch)'."""
        result = self.run(["remote", "-v"])
        if not result.ok:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def remote_names(self) -> List[str]:
        names = []
        for line in self.remotes():
            name = line.split()[0]
            if name not in names:
                names.append(name)
        return names

    def current_branch(self) -> Optional[str]:
        result = self.run(["branch", "--show-current"])
        if not result.ok:
            return None
        # Empty output means a detached HEAD
        return result.stdout.strip() or None

    def has_uncommitted_changes(self) -> bool:
        # Non-zero also covers a repository without any commit yet
        return not self.run(["diff-index", "--quiet", "HEAD", "--"]).ok
