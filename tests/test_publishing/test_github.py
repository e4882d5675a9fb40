"""Tests for GitHubPublisher against a mocked GitHub REST API."""

from __future__ import annotations

import base64
import json
from collections.abc import Callable
from typing import TypeAlias

import httpx
import pytest

from skillforge.publishing.github import (
    GitHubPublisher,
    render_readme,
    repository_slug,
)
from skillforge.resilience.errors import (
    PublishAuthError,
    PublishConflictError,
    PublishError,
)

API = "https://api.github.test"

Handler: TypeAlias = Callable[[httpx.Request], httpx.Response]


class FakeGitHub:
    """Records requests; answers like the GitHub API would."""

    def __init__(
        self,
        *,
        create_status: int = 201,
        create_body: dict[str, object] | None = None,
        user_status: int = 200,
    ) -> None:
        self.create_status = create_status
        self.create_body = create_body
        self.user_status = user_status
        self.puts: dict[str, dict[str, object]] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/user":
            return httpx.Response(self.user_status, json={"login": "octo"})
        if request.method == "POST" and path == "/user/repos":
            body = json.loads(request.content)
            if self.create_status >= 400:
                return httpx.Response(
                    self.create_status,
                    json=self.create_body or {"message": "nope"},
                )
            return httpx.Response(
                201,
                json={
                    "full_name": f"octo/{body['name']}",
                    "html_url": f"https://github.test/octo/{body['name']}",
                    "clone_url": f"https://github.test/octo/{body['name']}.git",
                },
            )
        if request.method == "GET" and "/contents/" in path:
            return httpx.Response(404, json={"message": "Not Found"})
        if request.method == "PUT" and "/contents/" in path:
            file_path = path.split("/contents/", 1)[1]
            self.puts[file_path] = json.loads(request.content)
            return httpx.Response(201, json={"content": {}})
        return httpx.Response(500, json={"message": "unexpected"})


def _publisher(github: Handler) -> GitHubPublisher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(github))
    return GitHubPublisher("token-123", API, client=client)


def _decoded(put: dict[str, object]) -> str:
    return base64.b64decode(str(put["content"])).decode()


async def test_publish_creates_repo_and_files() -> None:
    github = FakeGitHub()

    result = await _publisher(github).publish(
        "email-writer",
        "Writes emails",
        "# Email Writer",
        {"practices.md": "# Practices", "examples.md": "# Examples"},
    )

    assert result.repository_name == "octo/email-writer"
    assert result.repository_url == "https://github.test/octo/email-writer"
    assert result.install_command == "openskills install octo/email-writer"
    assert _decoded(github.puts["SKILL.md"]) == "# Email Writer"
    assert _decoded(github.puts["references/examples.md"]) == "# Examples"
    assert "openskills install octo/email-writer" in _decoded(
        github.puts["README.md"]
    )
    assert "scripts/.gitkeep" in github.puts
    create = next(r for r in github.requests if r.method == "POST")
    assert json.loads(create.content)["private"] is True
    assert create.headers["Authorization"] == "Bearer token-123"


async def test_name_taken_is_conflict() -> None:
    github = FakeGitHub(
        create_status=422,
        create_body={
            "message": "Repository creation failed.",
            "errors": [{"field": "name", "message": "already exists"}],
        },
    )
    with pytest.raises(PublishConflictError):
        await _publisher(github).publish("email-writer", "", "# x", {})


async def test_other_422_is_publish_error() -> None:
    github = FakeGitHub(
        create_status=422, create_body={"message": "Validation Failed"}
    )
    with pytest.raises(PublishError) as exc_info:
        await _publisher(github).publish("email-writer", "", "# x", {})
    assert not isinstance(exc_info.value, PublishConflictError)


async def test_bad_token_is_auth_error() -> None:
    github = FakeGitHub(user_status=401)
    with pytest.raises(PublishAuthError):
        await _publisher(github).publish("email-writer", "", "# x", {})


async def test_explicit_owner_skips_user_lookup() -> None:
    github = FakeGitHub(user_status=500)
    result = await _publisher(github).publish(
        "email-writer", "", "# x", {}, owner="octo", private=False
    )
    assert result.repository_name == "octo/email-writer"
    assert all(r.url.path != "/user" for r in github.requests)


async def test_transport_failure_is_publish_error() -> None:
    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(PublishError):
        await _publisher(broken).publish("email-writer", "", "# x", {})


def test_empty_token_rejected() -> None:
    with pytest.raises(PublishAuthError):
        GitHubPublisher("")


def test_repository_slug_and_readme() -> None:
    assert repository_slug("My Skill_v2") == "my-skill-v2"
    readme = render_readme("my-skill", "Does things", "octo")
    assert readme.startswith("# my-skill\n\nDoes things")
    assert "openskills install octo/my-skill" in readme
