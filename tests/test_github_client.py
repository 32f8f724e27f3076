import asyncio

import httpx
import pytest

from app.core.errors import NotFound, UpstreamError, ValidationError
from app.main import app
from app.services.github_client import GitHubClient, get_github_client

USER = {
    "login": "octocat",
    "avatar_url": "https://avatars.example.com/u/1",
    "html_url": "https://github.com/octocat",
    "name": "The Octocat",
    "bio": None,
    "public_repos": 12,
    "followers": 100,
}


def _repo(i):
    return {
        "id": i,
        "name": f"repo-{i}",
        "description": None,
        "html_url": f"https://github.com/octocat/repo-{i}",
        "stargazers_count": i,
        "forks_count": 0,
        "language": "Python",
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    }


def github_transport(status=200, user=USER, repos=None, calls=None):
    repos = [_repo(i) for i in range(12)] if repos is None else repos

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if status != 200:
            return httpx.Response(status, json={"message": "nope"})
        if request.url.path.endswith("/repos"):
            return httpx.Response(200, json=repos)
        return httpx.Response(200, json=user)

    return httpx.MockTransport(handler)


def test_fetch_profile_and_repos():
    calls = []
    client = GitHubClient(base_url="https://api.github.test", transport=github_transport(calls=calls))
    result = asyncio.run(client.fetch("octocat"))

    assert result["profile"].login == "octocat"
    assert len(result["repositories"]) == 10
    assert [r.url.path for r in calls] == ["/users/octocat", "/users/octocat/repos"]
    assert calls[1].url.params["sort"] == "updated"
    assert calls[1].url.params["per_page"] == "10"


def test_unknown_user():
    client = GitHubClient(base_url="https://api.github.test", transport=github_transport(status=404))
    with pytest.raises(NotFound) as exc:
        asyncio.run(client.fetch("ghost"))
    assert "ghost" in exc.value.detail


def test_rate_limited_is_upstream_error():
    client = GitHubClient(base_url="https://api.github.test", transport=github_transport(status=403))
    with pytest.raises(UpstreamError):
        asyncio.run(client.fetch("octocat"))


def test_unexpected_shape():
    client = GitHubClient(
        base_url="https://api.github.test",
        transport=github_transport(user={"login": "octocat"})
    )
    with pytest.raises(UpstreamError):
        asyncio.run(client.fetch("octocat"))


def test_empty_username():
    client = GitHubClient(base_url="https://api.github.test", transport=github_transport())
    with pytest.raises(ValidationError):
        asyncio.run(client.fetch("  "))


def test_route(client, student):
    app.dependency_overrides[get_github_client] = lambda: GitHubClient(
        base_url="https://api.github.test", transport=github_transport()
    )
    try:
        resp = client.get("/api/github/octocat", headers=student)
    finally:
        app.dependency_overrides.pop(get_github_client, None)
    assert resp.status_code == 200
    body = resp.json()
    assert body["profile"]["followers"] == 100
    assert body["repositories"][0]["name"] == "repo-0"


def test_route_requires_auth(client):
    assert client.get("/api/github/octocat").status_code == 401
