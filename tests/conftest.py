from __future__ import annotations

import random
from typing import Any, Optional

import pytest

from gifflow.cache.installations import InstallationRegistry


class FakeGitHubClient:
    """Records every REST call made through the gifflow.github.api surface."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.search_results: list[dict[str, Any]] = []
        self.collaborators: list[dict[str, Any]] = []
        self.repos: dict[int, list[dict[str, Any]]] = {}
        self.installations: list[dict[str, Any]] = []
        self.failing: set[str] = set()

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.failing:
            raise RuntimeError(f"{name} failed")

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for called, args in self.calls if called == name]

    @property
    def comments(self) -> list[str]:
        return [
            args[-1]
            for called, args in self.calls
            if called in ("create_comment", "create_commit_comment")
        ]

    async def search_issues(self, installation_id: int, query: str, per_page: int) -> list[dict[str, Any]]:
        self._record("search_issues", installation_id, query, per_page)
        return self.search_results

    async def create_comment(self, installation_id: int, owner: str, repo: str, number: int, body: str) -> dict[str, Any]:
        self._record("create_comment", installation_id, owner, repo, number, body)
        return {"id": len(self.calls)}

    async def create_commit_comment(self, installation_id: int, owner: str, repo: str, sha: str, body: str) -> dict[str, Any]:
        self._record("create_commit_comment", installation_id, owner, repo, sha, body)
        return {"id": len(self.calls)}

    async def add_labels(self, installation_id: int, owner: str, repo: str, number: int, labels: list[str]) -> None:
        self._record("add_labels", installation_id, owner, repo, number, labels)

    async def add_assignees(self, installation_id: int, owner: str, repo: str, number: int, assignees: list[str]) -> None:
        self._record("add_assignees", installation_id, owner, repo, number, assignees)

    async def list_collaborators(self, installation_id: int, owner: str, repo: str) -> list[dict[str, Any]]:
        self._record("list_collaborators", installation_id, owner, repo)
        return self.collaborators

    async def list_installation_repos(self, installation_id: int) -> list[dict[str, Any]]:
        self._record("list_installation_repos", installation_id)
        return self.repos.get(installation_id, [])

    async def list_app_installations(self) -> list[dict[str, Any]]:
        self._record("list_app_installations")
        return self.installations


class FakeMedia:
    def __init__(self, url: Optional[str] = "https://media.tenor.com/fake.gif") -> None:
        self.url = url
        self.terms: list[str] = []

    async def resolve(self, term: str) -> Optional[str]:
        self.terms.append(term)
        return self.url


class FirstChoice(random.Random):
    def choice(self, seq):  # type: ignore[override]
        return seq[0]


@pytest.fixture
def client() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture
def rng() -> random.Random:
    return FirstChoice()


@pytest.fixture
def registry() -> InstallationRegistry:
    return InstallationRegistry()


@pytest.fixture
def repository() -> dict[str, Any]:
    return {"name": "widgets", "full_name": "acme/widgets", "owner": {"login": "acme"}}
