"""Publish a skill to a new GitHub repository over the REST API.

Creates the repository, then commits README.md, SKILL.md and every
reference file through the contents API. Failures are classified into
PublishAuthError, PublishConflictError or PublishError by HTTP status
and response body, never by matching message text.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from skillforge.constants import REFERENCES_DIR
from skillforge.resilience.errors import (
    PublishAuthError,
    PublishConflictError,
    PublishError,
)

logger = logging.getLogger(__name__)

_USER_AGENT = "skillforge"
_BRANCH = "main"
_PLACEHOLDER_DIRS = ("scripts", "assets")


@dataclass(frozen=True)
class PublishResult:
    repository_url: str
    repository_name: str
    clone_url: str

    @property
    def install_command(self) -> str:
        return f"openskills install {self.repository_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "repositoryUrl": self.repository_url,
            "repositoryName": self.repository_name,
            "cloneUrl": self.clone_url,
            "installCommand": self.install_command,
        }


def repository_slug(skill_name: str) -> str:
    slug = "".join(
        c if c.isascii() and (c.isalnum() or c == "-") else "-"
        for c in skill_name.lower()
    )
    return slug.strip("-")


def render_readme(skill_name: str, description: str, owner: str) -> str:
    repo = repository_slug(skill_name)
    return (
        f"# {skill_name}\n\n"
        f"{description}\n\n"
        "## Installation\n\n"
        "Install this skill using"
        " [OpenSkills](https://github.com/numman-ali/openskills):\n\n"
        "```bash\n"
        f"openskills install {owner}/{repo}\n"
        "```\n\n"
        "Or manually:\n\n"
        "1. Clone this repository\n"
        f"2. Copy the skill folder to `.claude/skills/{skill_name}/`\n"
        "3. Add to your `AGENTS.md` file\n\n"
        "## Usage\n\n"
        "This skill follows the SKILL.md format and works with any agent"
        " that supports it.\n\n"
        "## Structure\n\n"
        "- `SKILL.md` - Main skill instructions\n"
        "- `references/` - Supporting documentation\n"
        "- `scripts/` - Helper scripts (if any)\n"
        "- `assets/` - Templates and resources (if any)\n"
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or str(response.status_code)
    if isinstance(body, dict):
        return str(body.get("message") or response.reason_phrase)
    return response.reason_phrase


def _is_name_conflict(response: httpx.Response) -> bool:
    """422 whose ``errors`` list flags the ``name`` field."""
    if response.status_code != 422:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    errors = body.get("errors") if isinstance(body, dict) else None
    if not isinstance(errors, list):
        return False
    return any(
        isinstance(e, dict) and e.get("field") == "name" for e in errors
    )


class GitHubPublisher:
    """Thin client over the GitHub REST API for skill publication.

    Pass ``client`` to reuse a connection pool (or a mock transport in
    tests); otherwise one is created and closed per publish.
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not token:
            raise PublishAuthError("GitHub token is required")
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": _USER_AGENT,
        }

    async def publish(
        self,
        skill_name: str,
        description: str,
        main_content: str,
        references: Mapping[str, str],
        *,
        private: bool = True,
        owner: str | None = None,
    ) -> PublishResult:
        try:
            if self._client is not None:
                return await self._publish(
                    self._client,
                    skill_name,
                    description,
                    main_content,
                    references,
                    private=private,
                    owner=owner,
                )
            async with httpx.AsyncClient(timeout=30.0) as client:
                return await self._publish(
                    client,
                    skill_name,
                    description,
                    main_content,
                    references,
                    private=private,
                    owner=owner,
                )
        except httpx.HTTPError as exc:
            raise PublishError(f"GitHub API request failed: {exc}") from exc

    async def _publish(
        self,
        client: httpx.AsyncClient,
        skill_name: str,
        description: str,
        main_content: str,
        references: Mapping[str, str],
        *,
        private: bool,
        owner: str | None,
    ) -> PublishResult:
        repo_name = repository_slug(skill_name)
        if owner is None:
            owner = await self._resolve_owner(client)
        repo = await self._create_repository(
            client, repo_name, description, private
        )
        full_name = str(repo.get("full_name") or f"{owner}/{repo_name}")
        owner, _, repo_name = full_name.partition("/")

        files: list[tuple[str, str, str]] = [
            (
                "README.md",
                render_readme(skill_name, description, owner),
                "Initial commit: Add README",
            ),
            ("SKILL.md", main_content, "Add SKILL.md"),
        ]
        files.extend(
            (
                f"{REFERENCES_DIR}/{filename}",
                content,
                f"Add reference: {filename}",
            )
            for filename, content in sorted(references.items())
        )
        for path, content, message in files:
            await self._put_file(
                client, owner, repo_name, path, content, message
            )

        for directory in _PLACEHOLDER_DIRS:
            try:
                await self._put_file(
                    client,
                    owner,
                    repo_name,
                    f"{directory}/.gitkeep",
                    "",
                    f"Add {directory} directory",
                )
            except (PublishError, httpx.HTTPError) as exc:
                logger.warning(
                    "event=publish_placeholder_failed repo=%s dir=%s"
                    " error=%s",
                    full_name,
                    directory,
                    exc,
                )

        logger.info(
            "event=skill_published repo=%s files=%d",
            full_name,
            len(files),
        )
        return PublishResult(
            repository_url=str(repo.get("html_url", "")),
            repository_name=full_name,
            clone_url=str(repo.get("clone_url", "")),
        )

    async def _resolve_owner(self, client: httpx.AsyncClient) -> str:
        response = await client.get(
            f"{self._api_url}/user", headers=self._headers()
        )
        if response.status_code in (401, 403):
            raise PublishAuthError("Failed to authenticate with GitHub")
        if response.is_error:
            raise PublishError(
                f"GitHub API error: {_error_message(response)}"
            )
        return str(response.json()["login"])

    async def _create_repository(
        self,
        client: httpx.AsyncClient,
        repo_name: str,
        description: str,
        private: bool,
    ) -> dict[str, Any]:
        response = await client.post(
            f"{self._api_url}/user/repos",
            headers=self._headers(),
            json={
                "name": repo_name,
                "description": description or f"Skill: {repo_name}",
                "private": private,
                "auto_init": False,
            },
        )
        if response.status_code in (401, 403):
            raise PublishAuthError("Invalid or expired GitHub token")
        if _is_name_conflict(response):
            raise PublishConflictError(
                f"Repository {repo_name} already exists"
            )
        if response.is_error:
            raise PublishError(
                f"Failed to create repository: {_error_message(response)}"
            )
        return dict(response.json())

    async def _put_file(
        self,
        client: httpx.AsyncClient,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
    ) -> None:
        url = f"{self._api_url}/repos/{owner}/{repo}/contents/{path}"
        payload: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode()).decode("ascii"),
            "branch": _BRANCH,
        }
        existing = await client.get(
            url, headers=self._headers(), params={"ref": _BRANCH}
        )
        if existing.status_code == 200:
            sha = existing.json().get("sha")
            if sha:
                payload["sha"] = sha

        response = await client.put(
            url, headers=self._headers(), json=payload
        )
        if response.status_code in (401, 403):
            raise PublishAuthError("Invalid or expired GitHub token")
        if response.is_error:
            raise PublishError(
                f"Failed to create/update {path}:"
                f" {_error_message(response)}"
            )
