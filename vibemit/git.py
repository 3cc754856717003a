"""Git operations for vibemit."""

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from .config import DEFAULT_MAX_DIFF_LINES
from .exceptions import GitError, ValidationError

logger = logging.getLogger(__name__)

# Generated files whose diffs add noise without helping the model.
NOISY_FILE_PATTERNS = [
    re.compile(r"^package-lock\.json$"),
    re.compile(r"^yarn\.lock$"),
    re.compile(r"^pnpm-lock\.yaml$"),
    re.compile(r"^Cargo\.lock$"),
    re.compile(r"^Gemfile\.lock$"),
    re.compile(r"^composer\.lock$"),
    re.compile(r"^poetry\.lock$"),
    re.compile(r"^Pipfile\.lock$"),
    re.compile(r"^go\.sum$"),
    re.compile(r"^flake\.lock$"),
]

_SECTION_SPLIT_RE = re.compile(r"(?=^diff --git )", re.MULTILINE)
_SECTION_HEADER_RE = re.compile(r"^diff --git a/(.+?) b/(.+)")

NO_STAGED_CHANGES_MESSAGE = (
    "No staged changes found.\n\n"
    "Stage your changes first:\n"
    "  git add <files>\n"
    "  git add -p"
)


def get_git_dir(cwd: Optional[Path] = None) -> Optional[str]:
    """Return the ``.git`` directory path, or ``None`` outside a repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--git-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    git_dir = result.stdout.strip()
    return git_dir or None


def summarize_noisy_files(diff: str) -> str:
    """Replace lockfile sections with a one-line ``[path changed]`` marker."""
    result: list[str] = []
    for section in _SECTION_SPLIT_RE.split(diff):
        match = _SECTION_HEADER_RE.match(section)
        if not match:
            result.append(section)
            continue
        file_path = match.group(2)
        basename = file_path.split("/")[-1]
        if any(pattern.match(basename) for pattern in NOISY_FILE_PATTERNS):
            logger.debug("git.summarize noisy file %s", file_path)
            result.append(f"[{file_path} changed]\n")
        else:
            result.append(section)
    return "".join(result).strip()


def truncate_diff(diff: str, max_diff_lines: int) -> str:
    """Keep the first ``max_diff_lines`` lines and note the cut."""
    limit = max(1, int(max_diff_lines))
    lines = diff.split("\n")
    if len(lines) <= limit:
        return diff
    return (
        "\n".join(lines[:limit])
        + f"\n\n[Diff truncated: showing {limit} of {len(lines)} lines]"
    )


class GitRepo:
    """Handles Git repository operations."""

    def __init__(self, repo_path: Optional[str] = None) -> None:
        self.repo_path = Path(repo_path or ".")
        if not self._is_git_repo():
            raise GitError(f"Not a Git repository: {self.repo_path}")

    def _is_git_repo(self) -> bool:
        try:
            self._run_git_command(["rev-parse", "--git-dir"])
            return True
        except GitError:
            return False

    def _run_git_command(self, args: list[str]) -> str:
        """Run a Git command and return its stripped output."""
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            cmd = " ".join(args)
            raise GitError(f"Git command failed: {cmd}\n{e.stderr}") from e
        except FileNotFoundError as exc:
            raise GitError("Git command not found. Please install Git.") from exc

    def get_staged_diff(self, max_diff_lines: int = DEFAULT_MAX_DIFF_LINES) -> str:
        """Return the staged diff with lockfiles summarized and size capped.

        Raises:
            ValidationError: If nothing is staged.
        """
        diff = self._run_git_command(["diff", "--staged"])
        if not diff:
            raise ValidationError(NO_STAGED_CHANGES_MESSAGE)
        return truncate_diff(summarize_noisy_files(diff), max_diff_lines)

    def get_staged_stat(self) -> str:
        """File-level summary of staged changes (``git diff --staged --stat``)."""
        return self._run_git_command(["diff", "--staged", "--stat"])

    def commit(self, message: str) -> str:
        """Create a commit with the given message and return git's output."""
        return self._run_git_command(["commit", "-m", message])
