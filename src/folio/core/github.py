"""GitHub REST client for the owner's public repositories.

The site listing is lenient: any failure is logged and yields an empty
list, which pages render as "nothing to show". The sync command uses the
strict variant, which raises ``GitHubError`` instead.
"""

import logging
import time

import httpx
from pydantic import ValidationError

from folio.core.models import GitHubRepo

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 10.0


class GitHubError(Exception):
    """Raised when the repository list cannot be fetched."""


def build_headers(token: str | None = None, user_agent: str = "folio-site") -> dict[str, str]:
    """Headers for the GitHub API, authenticated when a token is given."""
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": user_agent,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _parse_repos(data: list[dict]) -> list[GitHubRepo]:
    repos = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            repos.append(GitHubRepo.model_validate(item))
        except ValidationError:
            logger.debug("Skipping malformed repository entry: %r", item.get("name"))
    return repos


async def fetch_repos(
    username: str,
    token: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[GitHubRepo]:
    """Fetch public non-fork repositories, most recently updated first.

    Returns an empty list when the request fails.
    """
    url = f"{GITHUB_API_URL}/users/{username}/repos"
    params = {"per_page": 100, "sort": "updated"}
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT)
    try:
        response = await client.get(url, params=params, headers=build_headers(token))
    except httpx.HTTPError as e:
        logger.warning("Failed to fetch GitHub repos for %s: %s", username, e)
        return []
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        logger.warning(
            "Failed to fetch GitHub repos for %s: %d %s",
            username,
            response.status_code,
            response.text,
        )
        return []

    try:
        data = response.json()
    except ValueError:
        data = None
    if not isinstance(data, list):
        logger.warning("Unexpected GitHub response for %s", username)
        return []

    repos = [r for r in _parse_repos(data) if not r.fork]
    return sorted(repos, key=lambda r: r.updated_at, reverse=True)


def fetch_owned_repos(
    username: str,
    token: str | None = None,
    client: httpx.Client | None = None,
) -> list[GitHubRepo]:
    """Fetch public non-fork repositories owned by ``username``.

    Raises:
        GitHubError: If the request fails or GitHub answers with an error.
    """
    url = f"{GITHUB_API_URL}/users/{username}/repos"
    params = {"per_page": 100, "type": "owner", "sort": "updated"}
    headers = build_headers(token, user_agent="folio-sync")
    owns_client = client is None
    client = client or httpx.Client(timeout=REQUEST_TIMEOUT)
    try:
        response = client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        raise GitHubError(f"GitHub fetch failed: {e}") from e
    finally:
        if owns_client:
            client.close()

    if not response.is_success:
        raise GitHubError(
            f"GitHub fetch failed: {response.status_code} "
            f"{response.reason_phrase} {response.text}"
        )

    try:
        data = response.json()
    except ValueError as e:
        raise GitHubError(f"GitHub returned invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise GitHubError("GitHub returned an unexpected payload")

    return [
        r for r in _parse_repos(data)
        if not r.fork and r.visibility == "public"
    ]


class RepoCache:
    """Keeps a successful repository list for ``ttl`` seconds.

    Empty results are never stored, so a failed fetch is retried on the
    next request.
    """

    def __init__(self, ttl: float = 3600, clock=time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, list[GitHubRepo]]] = {}

    def get(self, username: str) -> list[GitHubRepo] | None:
        entry = self._entries.get(username)
        if entry is None:
            return None
        stored_at, repos = entry
        if self._clock() - stored_at >= self.ttl:
            del self._entries[username]
            return None
        return repos

    def put(self, username: str, repos: list[GitHubRepo]) -> None:
        if repos:
            self._entries[username] = (self._clock(), repos)

    def clear(self) -> None:
        self._entries.clear()

    async def get_repos(
        self,
        username: str,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> list[GitHubRepo]:
        """Return cached repositories, fetching them when stale."""
        cached = self.get(username)
        if cached is not None:
            return cached
        repos = await fetch_repos(username, token=token, client=client)
        self.put(username, repos)
        return repos
