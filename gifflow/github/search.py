from dataclasses import dataclass
from typing import Literal, Optional

from gifflow.github import api
from gifflow.logger import get_logger


logger = get_logger("gifflow.github.search")

MAX_SIMILAR = 5

Kind = Literal["issue", "pr"]


@dataclass(frozen=True)
class SimilarItem:
    number: int
    title: str


async def find_similar(
    installation_id: int,
    owner: str,
    repo: str,
    title: str,
    exclude_number: Optional[int],
    kind: Kind,
    client=api,
) -> Optional[list[SimilarItem]]:
    """
    Search the repository for issues/PRs resembling `title`.

    Returns None when the search itself failed, [] when it succeeded
    without matches.
    """
    query = f"{title} repo:{owner}/{repo} is:{kind}"

    try:
        # One extra slot so the triggering item can be dropped
        items = await client.search_issues(installation_id, query, MAX_SIMILAR + 1)
    except Exception:
        logger.exception("Similar %s search failed for %s/%s", kind, owner, repo)
        return None

    similar = [
        SimilarItem(number=item["number"], title=item.get("title") or "")
        for item in items or []
        if item.get("number") is not None and item.get("number") != exclude_number
    ]
    return similar[:MAX_SIMILAR]
