import httpx
from typing import Any, Awaitable, Callable, Optional

from gifflow import settings
from gifflow.github.auth import app_headers, get_installation_token
from gifflow.logger import get_logger


logger = get_logger("gifflow.github.api")

PER_PAGE = 100
MAX_PAGES = 50


class RepoUnavailable(Exception):
    """
    Raised when a repository is deleted, renamed, or the app lost access.
    """
    pass


async def _headers(installation_id: int) -> dict[str, str]:
    token = await get_installation_token(installation_id)
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
    }


def _check(response: httpx.Response, endpoint: str) -> Any:
    status = response.status_code

    if status in (404, 410):
        logger.warning("Repo unavailable (%s): %s", status, endpoint)
        raise RepoUnavailable(f"Repository or resource not found: {endpoint}")

    if status in (401, 403):
        logger.warning("Access denied (%s): %s", status, endpoint)
        raise RepoUnavailable(f"Access denied or app uninstalled: {endpoint}")

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError:
        logger.exception("GitHub API error %s for %s", status, endpoint)
        raise

    if status == 204:
        return None

    try:
        return response.json()
    except ValueError:
        logger.exception("Failed to decode JSON response from %s", endpoint)
        raise


async def _request(
    installation_id: int,
    method: str,
    endpoint: str,
    json: Optional[dict] = None,
    params: Optional[dict] = None,
) -> Any:
    headers = await _headers(installation_id)
    url = f"{settings.GITHUB_API_URL}{endpoint}"

    async with httpx.AsyncClient(
        follow_redirects=True,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    ) as client:
        response = await client.request(
            method,
            url,
            headers=headers,
            json=json,
            params=params,
        )

    return _check(response, endpoint)


async def _collect_pages(
    fetch: Callable[[int], Awaitable[Any]],
    key: Optional[str] = None,
) -> list[dict]:
    """
    Walk `page=1..` until a short page comes back.

    `key` names the list inside wrapped responses like
    {"total_count": n, "repositories": [...]}.
    """
    items: list[dict] = []

    for page in range(1, MAX_PAGES + 1):
        result = await fetch(page)
        batch = (result or {}).get(key) if key else result
        batch = batch or []
        items.extend(batch)

        if len(batch) < PER_PAGE:
            break
    else:
        logger.warning("Stopped paging after %d pages", MAX_PAGES)

    return items


# =========================================================
# App-level (JWT) calls
# =========================================================

async def _app_request(endpoint: str, params: Optional[dict] = None) -> Any:
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        response = await client.get(
            f"{settings.GITHUB_API_URL}{endpoint}",
            headers=app_headers(),
            params=params,
        )

    return _check(response, endpoint)


async def list_app_installations() -> list[dict]:
    return await _collect_pages(
        lambda page: _app_request(
            "/app/installations",
            params={"per_page": PER_PAGE, "page": page},
        )
    )


# =========================================================
# Installation-scoped calls
# =========================================================

async def list_installation_repos(installation_id: int) -> list[dict]:
    return await _collect_pages(
        lambda page: _request(
            installation_id,
            "GET",
            "/installation/repositories",
            params={"per_page": PER_PAGE, "page": page},
        ),
        key="repositories",
    )


async def search_issues(installation_id: int, query: str, per_page: int) -> list[dict]:
    result = await _request(
        installation_id,
        "GET",
        "/search/issues",
        params={"q": query, "per_page": per_page},
    )
    return (result or {}).get("items", [])


async def create_comment(
    installation_id: int, owner: str, repo: str, number: int, body: str
) -> dict:
    return await _request(
        installation_id,
        "POST",
        f"/repos/{owner}/{repo}/issues/{number}/comments",
        json={"body": body},
    )


async def create_commit_comment(
    installation_id: int, owner: str, repo: str, sha: str, body: str
) -> dict:
    return await _request(
        installation_id,
        "POST",
        f"/repos/{owner}/{repo}/commits/{sha}/comments",
        json={"body": body},
    )


async def add_labels(
    installation_id: int, owner: str, repo: str, number: int, labels: list[str]
):
    return await _request(
        installation_id,
        "POST",
        f"/repos/{owner}/{repo}/issues/{number}/labels",
        json={"labels": labels},
    )


async def add_assignees(
    installation_id: int, owner: str, repo: str, number: int, assignees: list[str]
):
    return await _request(
        installation_id,
        "POST",
        f"/repos/{owner}/{repo}/issues/{number}/assignees",
        json={"assignees": assignees},
    )


async def list_collaborators(installation_id: int, owner: str, repo: str) -> list[dict]:
    return await _request(
        installation_id,
        "GET",
        f"/repos/{owner}/{repo}/collaborators",
        params={"per_page": 100},
    ) or []
