from __future__ import annotations

from typing import Any

import httpx
import pytest

from gifflow.github import api


def _repos(start: int, count: int) -> list[dict[str, Any]]:
    return [{"full_name": f"acme/r{n}"} for n in range(start, start + count)]


@pytest.mark.asyncio
async def test_installation_repos_follow_pages(monkeypatch) -> None:
    pages: list[int] = []

    async def fake_request(installation_id, method, endpoint, json=None, params=None):
        pages.append(params["page"])
        if params["page"] == 1:
            return {"total_count": 130, "repositories": _repos(0, api.PER_PAGE)}
        return {"total_count": 130, "repositories": _repos(api.PER_PAGE, 30)}

    monkeypatch.setattr(api, "_request", fake_request)

    repos = await api.list_installation_repos(9)

    assert pages == [1, 2]
    assert len(repos) == 130
    assert repos[-1] == {"full_name": "acme/r129"}


@pytest.mark.asyncio
async def test_app_installations_follow_pages(monkeypatch) -> None:
    async def fake_app_request(endpoint, params=None):
        page = params["page"]
        if page <= 2:
            return [{"id": page * 1000 + n} for n in range(api.PER_PAGE)]
        return [{"id": 99999}]

    monkeypatch.setattr(api, "_app_request", fake_app_request)

    installations = await api.list_app_installations()

    assert len(installations) == 2 * api.PER_PAGE + 1
    assert installations[-1] == {"id": 99999}


@pytest.mark.asyncio
async def test_paging_stops_at_page_cap(monkeypatch) -> None:
    monkeypatch.setattr(api, "MAX_PAGES", 3)

    async def full_page(page: int) -> list[dict[str, Any]]:
        return [{"id": page}] * api.PER_PAGE

    items = await api._collect_pages(full_page)

    assert len(items) == 3 * api.PER_PAGE


@pytest.mark.asyncio
async def test_empty_first_page() -> None:
    async def empty(page: int) -> None:
        return None

    assert await api._collect_pages(empty, key="repositories") == []


def _response(status: int, **kwargs: Any) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "https://api.github.test/x"), **kwargs)


@pytest.mark.parametrize("status", [401, 403, 404, 410])
def test_lost_access_maps_to_repo_unavailable(status: int) -> None:
    with pytest.raises(api.RepoUnavailable):
        api._check(_response(status), "/x")


def test_server_error_propagates() -> None:
    with pytest.raises(httpx.HTTPStatusError):
        api._check(_response(502), "/x")


def test_no_content_is_none() -> None:
    assert api._check(_response(204), "/x") is None
    assert api._check(_response(200, json={"ok": True}), "/x") == {"ok": True}
