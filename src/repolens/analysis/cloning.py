"""
RepoLens Source Fetching
Repository reference parsing, cloning and scratch directory cleanup.
"""

import os
import re
import sys
import shutil
import stat
import tempfile
import subprocess
import time
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from repolens.analysis.errors import FetchFailure, InvalidRepositoryReference
from repolens.models.core import Repository

logger = logging.getLogger(__name__)

_GITHUB_URL = re.compile(
    r"^(?:(?P<protocol>https?)://)?(?:www\.)?github\.com/"
    r"(?P<owner>[A-Za-z0-9_-]+)/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?(?:[/?#].*)?$"
)
_SHORTHAND = re.compile(r"^(?P<owner>[A-Za-z0-9_-]+)/(?P<repo>[A-Za-z0-9_.-]+?)(?:\.git)?$")


def parse_github_url(reference: str) -> Repository:
    """
    Parse a GitHub URL or ``owner/repo`` shorthand.

    Accepts http(s) URLs with or without ``www.``, a trailing ``.git`` and any
    extra path components (``/tree/main/src`` and the like), which are dropped.

    Args:
        reference: Raw repository reference supplied by the user

    Returns:
        Repository: owner, name and canonical https URL

    Raises:
        InvalidRepositoryReference: If the reference does not name a GitHub repository.
    """
    if not isinstance(reference, str) or not reference.strip():
        raise InvalidRepositoryReference(str(reference), "Repository URL is required")

    url = reference.strip()
    match = _GITHUB_URL.match(url) or _SHORTHAND.match(url)
    if not match:
        raise InvalidRepositoryReference(reference)

    owner = match.group("owner")
    name = match.group("repo")
    if name in (".", "..") or not name.strip("."):
        raise InvalidRepositoryReference(reference)

    return Repository(
        url=f"https://github.com/{owner}/{name}",
        owner=owner,
        name=name,
        full_name=f"{owner}/{name}",
    )


def sanitize_github_url(reference: str) -> str:
    """
    Sanitize a GitHub reference to the canonical ``https://github.com/owner/repo`` form.

    Raises:
        InvalidRepositoryReference: If the reference does not name a GitHub repository.
    """
    return parse_github_url(reference).url


class GitSourceFetcher:
    """
    Shallow-clones a repository with the git executable.

    A fetcher holds no connection state; the analysis service builds a new one
    for every request.
    """

    def __init__(
        self,
        git_executable: Optional[str] = None,
        depth: int = 1,
        timeout: float = 300.0,
    ):
        self.git_executable = git_executable or shutil.which("git")
        self.depth = depth
        self.timeout = timeout

    def fetch(self, clone_url: str, destination: str) -> None:
        """
        Clone ``clone_url`` into the (empty) ``destination`` directory.

        Raises:
            FetchFailure: If git is missing, the clone fails or times out.
        """
        if not self.git_executable:
            raise FetchFailure(
                "Git executable not found. Please install Git and ensure it is in the system's PATH."
            )

        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        try:
            subprocess.run(
                [
                    self.git_executable,
                    "clone",
                    "--depth",
                    str(self.depth),
                    clone_url,
                    destination,
                ],
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise FetchFailure(
                f"Repository cloning timed out after {self.timeout:g} seconds. "
                "The repository may be too large or network is slow."
            ) from e
        except subprocess.CalledProcessError as e:
            raise FetchFailure(f"Failed to clone repository: {(e.stderr or '').strip()}") from e
        except FileNotFoundError as e:
            raise FetchFailure(
                f"Git executable not found at '{self.git_executable}'. "
                "Please ensure Git is installed and the path is correct."
            ) from e


def _handle_remove_readonly(func, path, exc):
    """Clear the read-only bit (git pack files on Windows) and retry."""
    if os.path.exists(path):
        os.chmod(path, stat.S_IWRITE)
        func(path)


def cleanup_repository_safe(repo_dir: str) -> bool:
    """
    Remove a scratch directory, tolerating paths that are missing or half-populated.

    Args:
        repo_dir: Path to the directory to remove

    Returns:
        bool: True if the directory is gone afterwards, False otherwise
    """
    if not os.path.exists(repo_dir):
        return True

    try:
        if sys.version_info >= (3, 12):
            shutil.rmtree(repo_dir, onexc=_handle_remove_readonly)
        else:
            shutil.rmtree(repo_dir, onerror=_handle_remove_readonly)
        return True
    except PermissionError:
        time.sleep(1)
        try:
            for root, dirs, files in os.walk(repo_dir):
                for name in dirs + files:
                    path = os.path.join(root, name)
                    if os.path.exists(path):
                        os.chmod(path, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
            shutil.rmtree(repo_dir, ignore_errors=False)
            return True
        except OSError as retry_e:
            logger.warning(f"Failed to cleanup {repo_dir} after retry: {retry_e}")
            return False
    except OSError as e:
        logger.warning(f"Failed to cleanup {repo_dir}: {e}")
        return False


@contextmanager
def scratch_directory(prefix: str = "repolens_") -> Iterator[str]:
    """
    Provide a fresh, uniquely named temporary directory for one analysis.

    The directory is removed when the block exits, whether it returns normally
    or raises.
    """
    temp_dir = tempfile.mkdtemp(prefix=prefix)
    logger.info(f"Created scratch directory {temp_dir}")
    try:
        yield temp_dir
    finally:
        logger.info(f"Cleaning up scratch directory {temp_dir}")
        cleanup_repository_safe(temp_dir)
