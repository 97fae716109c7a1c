"""
Git access for change detection.

Two queries are needed: which files changed in a commit range, and what a
file looked like at a given revision. Both shell out to git.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Union

from catalog_notifier.core.errors import GitError

logger = logging.getLogger(__name__)


class VersionControl(Protocol):
    """Read-only version control queries used by the detectors."""

    def changed_files(self, commit_range: str) -> List[str]:
        ...

    def file_at_revision(self, file_path: str, revision: str) -> str:
        ...


def _unknown_range_error(commit_range: str) -> GitError:
    return GitError(
        "Git commit range not found",
        f'The commit range "{commit_range}" doesn\'t exist in this repository.',
        [
            "This usually happens when:",
            "• You're in a new repository with no previous commits",
            "• The specified commit range is invalid",
            "• The repository doesn't have enough commit history",
            "",
            "Solutions:",
            "• For new repositories: Make at least 2 commits first",
            "• Use a different commit range like: --commit-range HEAD~1..HEAD",
            "• Check your git history with: git log --oneline",
        ],
    )


def _not_a_repository_error() -> GitError:
    return GitError(
        "Not a Git repository",
        "The specified directory is not a Git repository.",
        [
            "Make sure you're running this command in a Git repository.",
            "Initialize Git with: git init",
        ],
    )


class GitRepository:
    """
    Git repository containing (or equal to) the catalog directory.

    Usage:
        repo = GitRepository("./catalog")
        files = repo.changed_files("HEAD~1..HEAD")
        text = repo.file_at_revision(files[0], "HEAD~1")
    """

    def __init__(self, path: Union[str, Path], git_binary: str = "git"):
        self.path = Path(path).resolve()
        self.git_binary = git_binary
        self._root: Optional[Path] = None

    def _run(self, args: List[str], cwd: Path) -> subprocess.CompletedProcess:
        logger.debug(f"git {' '.join(args)} (cwd={cwd})")
        return subprocess.run(
            [self.git_binary, *args],
            cwd=cwd,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            check=False,
        )

    def root(self) -> Path:
        """Top-level directory of the repository."""
        if self._root is None:
            try:
                proc = self._run(["rev-parse", "--show-toplevel"], cwd=self.path)
            except (FileNotFoundError, NotADirectoryError) as e:
                raise _not_a_repository_error() from e
            if proc.returncode != 0:
                raise _not_a_repository_error()
            self._root = Path(proc.stdout.strip()).resolve()
        return self._root

    def changed_files(self, commit_range: str) -> List[str]:
        """
        List files changed in a commit range.

        Args:
            commit_range: "A..B" or "A...B"

        Returns:
            Absolute paths of the changed files

        Raises:
            GitError: If the range is unknown or the path is not a repository
        """
        root = self.root()
        # -z: NUL-separated, unquoted paths (non-ASCII names included)
        proc = self._run(
            ["-c", "core.quotePath=false", "diff", "--name-only", "-z", commit_range],
            cwd=root,
        )

        if proc.returncode != 0:
            stderr = proc.stderr or ""
            if "unknown revision" in stderr or "bad revision" in stderr or "ambiguous argument" in stderr:
                raise _unknown_range_error(commit_range)
            if "not a git repository" in stderr.lower():
                raise _not_a_repository_error()
            raise GitError(
                "Git command failed",
                stderr.strip() or f"git diff exited with status {proc.returncode}",
            )

        files = [name for name in proc.stdout.split("\0") if name]
        return [str(root / f) for f in files]

    def file_at_revision(self, file_path: str, revision: str) -> str:
        """
        Content of a file at a revision.

        Returns:
            File text, or "" if the file did not exist at that revision
        """
        try:
            root = self.root()
            relative = Path(file_path).resolve().relative_to(root).as_posix()
        except (GitError, ValueError) as e:
            logger.debug(f"Cannot locate {file_path} in repository: {e}")
            return ""

        proc = self._run(["show", f"{revision}:{relative}"], cwd=root)
        if proc.returncode != 0:
            logger.debug(f"{relative} not present at {revision}")
            return ""
        return proc.stdout
