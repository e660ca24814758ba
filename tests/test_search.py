from __future__ import annotations

import pytest

from gifflow.github.search import MAX_SIMILAR, SimilarItem, find_similar


@pytest.mark.asyncio
async def test_query_is_scoped_to_repo_and_kind(client) -> None:
    await find_similar(1, "acme", "widgets", "Crash on save", 7, "issue", client=client)

    assert client.calls_to("search_issues") == [
        (1, "Crash on save repo:acme/widgets is:issue", MAX_SIMILAR + 1)
    ]


@pytest.mark.asyncio
async def test_triggering_item_is_excluded(client) -> None:
    client.search_results = [
        {"number": 7, "title": "Crash on save"},
        {"number": 3, "title": "Crash when saving"},
    ]

    result = await find_similar(1, "acme", "widgets", "Crash on save", 7, "pr", client=client)

    assert result == [SimilarItem(3, "Crash when saving")]


@pytest.mark.asyncio
async def test_at_most_five_results(client) -> None:
    client.search_results = [{"number": n, "title": f"t{n}"} for n in range(1, 7)]

    result = await find_similar(1, "acme", "widgets", "t", 99, "issue", client=client)

    assert [item.number for item in result] == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_no_results_is_empty_not_none(client) -> None:
    assert await find_similar(1, "acme", "widgets", "t", 1, "issue", client=client) == []


@pytest.mark.asyncio
async def test_failure_is_none(client) -> None:
    client.failing.add("search_issues")

    assert await find_similar(1, "acme", "widgets", "t", 1, "issue", client=client) is None
