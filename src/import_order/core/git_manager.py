"""
Git working tree status provider using GitPython directly
"""

import logging
from pathlib import Path

from git import GitCommandError, Repo
from git.exc import BadName

logger = logging.getLogger(__name__)


class GitManager:
    """Reports which files of a work tree have changed"""

    def __init__(self, repo_path: str | Path | None = None):
        """
        Initialize Git manager

        Args:
            repo_path: Path inside a Git work tree. If None, the current
                directory is used and parent directories are searched.
        """
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.repo = None
        self._initialize_repo()

    def _initialize_repo(self) -> None:
        """Initialize Git repository object"""
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
            self.repo_path = Path(self.repo.working_dir)
            logger.debug(f"Initialized Git repository at {self.repo_path}")
        except Exception as e:
            logger.error(f"Failed to initialize Git repository: {e}")
            raise ValueError(f"Not a valid Git repository: {self.repo_path}")

    def _absolute(self, paths: set[str]) -> list[Path]:
        """Absolute paths of the entries that still exist on disk"""
        files = []
        for rel_path in sorted(paths):
            path = self.repo_path / rel_path
            if path.is_file():
                files.append(path)
        return files

    def _has_head(self) -> bool:
        try:
            self.repo.head.commit
            return True
        except ValueError:
            # Repository without any commit yet
            return False

    def _working_tree_changes(self) -> set[str]:
        """Relative paths changed in the index or the working tree"""
        changed: set[str] = set()

        # Staged changes
        if self._has_head():
            for item in self.repo.index.diff("HEAD", R=True):
                if item.change_type in ("M", "A", "T"):
                    changed.add(item.b_path or item.a_path)
                elif item.change_type == "R":
                    changed.add(item.b_path)
        else:
            changed.update(str(path) for path, _stage in self.repo.index.entries)

        # Unstaged changes
        for item in self.repo.index.diff(None):
            if item.change_type != "D":
                changed.add(item.a_path)

        # Untracked files
        changed.update(self.repo.untracked_files)
        return changed

    def get_changed_files(self) -> list[Path]:
        """
        Files changed in the working tree

        Modified, added, renamed (new path) and untracked files, staged or
        not. Deleted files are excluded.

        Returns:
            Sorted list of absolute paths
        """
        files = self._absolute(self._working_tree_changes())
        logger.debug(f"Found {len(files)} changed files in {self.repo_path}")
        return files

    def get_files_changed_since(self, ref: str) -> list[Path]:
        """
        Files changed between a commit and the working tree

        Args:
            ref: Any commit reference (branch, tag, SHA)

        Returns:
            Sorted list of absolute paths, working tree changes included
        """
        commit = self.repo.commit(self.resolve_commit(ref))
        changed = self._working_tree_changes()
        for item in commit.diff(None):
            if item.change_type != "D":
                changed.add(item.b_path or item.a_path)
        return self._absolute(changed)

    def resolve_commit(
        self,
        ref: str,
    ) -> str:
        """Resolve a commit reference to full SHA"""
        try:
            commit = self.repo.commit(ref)
            return commit.hexsha
        except (BadName, GitCommandError, ValueError) as e:
            logger.error(f"Error resolving commit {ref}: {e}")
            raise ValueError(f"Invalid commit reference: {ref}")
