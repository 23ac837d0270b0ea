"""
GitHub Metadata Client

Looks up repository details (stars, forks, license, ...) through the GitHub REST API.
"""

import logging
from typing import Any, Callable, Dict, Optional

import requests

from repolens.analysis.cloning import parse_github_url
from repolens.analysis.errors import UpstreamError
from repolens.models.core import RepositoryMetadata

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to generate architecture. Please try again later."


class GitHubMetadataClient:
    """
    Thin client for ``GET /repos/{owner}/{repo}``.

    Every call opens its own ``requests.Session`` and closes it afterwards, so
    concurrent requests never share connection state.
    """

    def __init__(
        self,
        api_base: str = "https://api.github.com",
        timeout: float = 10.0,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session_factory = session_factory

    def fetch_metadata(self, reference: str) -> RepositoryMetadata:
        """
        Fetch repository details for a GitHub URL or ``owner/repo`` shorthand.

        Raises:
            InvalidRepositoryReference: If the reference is malformed (no request is made).
            UpstreamError: If GitHub answers with an error or cannot be reached.
        """
        repository = parse_github_url(reference)
        api_url = f"{self.api_base}/repos/{repository.owner}/{repository.name}"
        logger.info(f"Fetching repository metadata from {api_url}")

        with self.session_factory() as session:
            session.headers.update({"Accept": "application/vnd.github+json"})
            try:
                response = session.get(api_url, timeout=self.timeout)
            except requests.RequestException as e:
                logger.error(f"GitHub API request failed: {e}")
                raise UpstreamError(DEFAULT_ERROR_MESSAGE) from e

            if response.status_code != 200:
                message = _error_message(response)
                logger.error(f"GitHub API returned {response.status_code}: {message}")
                raise UpstreamError(message, status_code=response.status_code)

            try:
                payload = response.json()
            except ValueError as e:
                raise UpstreamError(DEFAULT_ERROR_MESSAGE) from e

        return metadata_from_payload(payload)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return DEFAULT_ERROR_MESSAGE


def metadata_from_payload(payload: Dict[str, Any]) -> RepositoryMetadata:
    """Map a GitHub ``repos`` API payload onto RepositoryMetadata."""
    owner: Optional[Dict[str, Any]] = payload.get("owner") or {}
    license_info: Optional[Dict[str, Any]] = payload.get("license")
    return RepositoryMetadata(
        repo_name=payload.get("name", ""),
        owner=owner.get("login", ""),
        description=payload.get("description"),
        stars=payload.get("stargazers_count") or 0,
        forks=payload.get("forks_count") or 0,
        language=payload.get("language"),
        license=license_info["name"] if license_info and license_info.get("name") else "No License",
        created_at=payload.get("created_at"),
        updated_at=payload.get("updated_at"),
        open_issues_count=payload.get("open_issues_count") or 0,
        watchers_count=payload.get("watchers_count") or 0,
    )
