"""
GitHub API Client

Fetches a public GitHub profile and its most recently updated
repositories for the onboarding GitHub step.

Two sequential unauthenticated calls:
    GET /users/{username}
    GET /users/{username}/repos?sort=updated&per_page=10

Responses are validated into GitHubUser / GitHubRepo records. No caching
and no rate-limit handling: a 403 from GitHub is just an UpstreamError.
"""

from typing import Any, List, Optional

import httpx
import structlog
from pydantic import ValidationError as SchemaError

from app.core.config import get_settings
from app.core.errors import NotFound, UpstreamError, ValidationError
from app.schemas.schemas import GitHubRepo, GitHubUser

settings = get_settings()
logger = structlog.get_logger(__name__)

MAX_REPOS = 10


class GitHubClient:

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self.transport = transport

    async def _get(self, client: httpx.AsyncClient, path: str, username: str, **params) -> Any:
        try:
            resp = await client.get(path, params=params or None)
        except httpx.HTTPError as e:
            logger.error("github_request_failed", path=path, error=str(e))
            raise UpstreamError(f"GitHub request failed: {e}")

        if resp.status_code == 404:
            raise NotFound(f"GitHub user not found: {username}")
        if resp.status_code >= 400:
            logger.error("github_bad_status", path=path, status=resp.status_code)
            raise UpstreamError(f"GitHub returned HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError:
            raise UpstreamError("GitHub returned a non-JSON response")

    async def fetch(self, username: str) -> dict:
        """
        Fetch profile + repositories.

        Returns:
            {"profile": GitHubUser, "repositories": [GitHubRepo, ...]}

        Raises:
            ValidationError: empty username
            NotFound: username does not exist
            UpstreamError: any other failure or unexpected response shape
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("GitHub username is required")

        async with httpx.AsyncClient(
            base_url=self.base_url,
            transport=self.transport,
            timeout=settings.http_timeout_seconds,
            headers={"Accept": "application/vnd.github+json"}
        ) as client:
            user_data = await self._get(client, f"/users/{username}", username)
            repo_data = await self._get(
                client, f"/users/{username}/repos", username, sort="updated", per_page=MAX_REPOS
            )

        try:
            profile = GitHubUser.model_validate(user_data)
            if not isinstance(repo_data, list):
                raise UpstreamError("GitHub returned an unexpected repository list")
            repositories: List[GitHubRepo] = [GitHubRepo.model_validate(r) for r in repo_data[:MAX_REPOS]]
        except SchemaError as e:
            logger.error("github_unexpected_shape", username=username, errors=e.error_count())
            raise UpstreamError("GitHub returned an unexpected response shape")

        return {"profile": profile, "repositories": repositories}


_github_client: GitHubClient = None


def get_github_client() -> GitHubClient:
    """FastAPI dependency - shared GitHub client."""
    global _github_client
    if _github_client is None:
        _github_client = GitHubClient()
    return _github_client
