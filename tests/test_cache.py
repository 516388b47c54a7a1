import asyncio

import pytest

from ledger_console.api.cache import RequestCache
from ledger_console.api.client import ApiError
from ledger_console.api.repositories import AccountsRepo


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch():
    cache = RequestCache()
    calls = []

    async def fetch():
        calls.append(1)
        await asyncio.sleep(0)
        return {"rows": [1, 2]}

    a, b = await asyncio.gather(cache.get_or_fetch("k", fetch), cache.get_or_fetch("k", fetch))
    c = await cache.get_or_fetch("k", fetch)

    assert a == b == c == {"rows": [1, 2]}
    assert calls == [1]
    assert "k" in cache


@pytest.mark.asyncio
async def test_failed_fetch_is_evicted_and_retried():
    cache = RequestCache()
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise ApiError("down", 503)
        return "ok"

    with pytest.raises(ApiError):
        await cache.get_or_fetch("k", flaky)
    assert "k" not in cache
    assert await cache.get_or_fetch("k", flaky) == "ok"
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_invalidate_by_prefix():
    cache = RequestCache()

    async def value():
        return 1

    for key in ("/accounts?a", "/accounts?b", "/items/1"):
        await cache.get_or_fetch(key, value)
    cache.invalidate("/accounts")
    assert len(cache) == 1
    cache.invalidate()
    assert len(cache) == 0


def test_make_key():
    assert RequestCache.make_key("/accounts") == "/accounts"
    assert RequestCache.make_key("/accounts", "page=2") == "/accounts::page=2"


@pytest.mark.asyncio
async def test_accounts_repo_filters_and_caches(api, client):
    api.on(
        "GET",
        "/accounts",
        {
            "data": [
                {"id": 1, "name": "Cash in Hand"},
                {"id": 2, "name": "Meezan Bank"},
                {"id": 3, "name": "Furniture"},
            ]
        },
    )
    repo = AccountsRepo(client, company_id=4)

    first = await repo.list_payment_accounts()
    second = await repo.list_payment_accounts()

    assert [a["id"] for a in first] == [1, 2]
    assert second == first
    assert len(api.calls) == 1
    params = api.calls[0][2].url.params
    assert params["company_id"] == "4"
    assert params["root_type"] == "asset"
    assert params["is_group"] == "0"

    repo.invalidate()
    await repo.list_payment_accounts()
    assert len(api.calls) == 2


@pytest.mark.asyncio
async def test_loss_accounts_are_expense_accounts(api, client):
    api.on("GET", "/accounts", [{"id": 90, "name": "Inventory Loss"}])
    rows = await AccountsRepo(client).list_loss_accounts()
    assert rows == [{"id": 90, "name": "Inventory Loss"}]
    assert api.calls[0][2].url.params["root_type"] == "expense"
