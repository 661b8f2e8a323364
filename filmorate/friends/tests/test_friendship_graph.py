"""
Тесты машины состояний дружбы на обоих хранилищах.
"""
import asyncio

import pytest

from filmorate.config import Settings
from filmorate.dependencies import build_services
from filmorate.exception import ValidationException
from filmorate.friends.dao import _SessionEdges
from filmorate.friends.graph import InMemoryFriendshipGraph
from filmorate.friends.models import FriendStatus


@pytest.mark.asyncio
async def test_request_creates_pending_edge(services, three_users):
    graph = services.users.friends
    alice, bob, _ = three_users

    status = await graph.request(alice.id, bob.id)

    assert status == FriendStatus.PENDING
    assert await graph.status(alice.id, bob.id) == FriendStatus.PENDING
    assert await graph.status(bob.id, alice.id) is None
    assert await graph.friends_of(alice.id) == set()
    assert await graph.incoming_requests(bob.id) == {alice.id}


@pytest.mark.asyncio
async def test_reciprocal_request_confirms_both_edges(services, three_users):
    graph = services.users.friends
    alice, bob, _ = three_users

    await graph.request(alice.id, bob.id)
    status = await graph.request(bob.id, alice.id)

    assert status == FriendStatus.CONFIRMED
    assert await graph.status(alice.id, bob.id) == FriendStatus.CONFIRMED
    assert await graph.status(bob.id, alice.id) == FriendStatus.CONFIRMED
    assert bob.id in await graph.friends_of(alice.id)
    assert alice.id in await graph.friends_of(bob.id)
    assert await graph.incoming_requests(bob.id) == set()


@pytest.mark.asyncio
async def test_repeated_request_after_confirmation_changes_nothing(services, three_users):
    graph = services.users.friends
    alice, bob, _ = three_users
    await graph.request(alice.id, bob.id)
    await graph.request(bob.id, alice.id)

    await graph.request(alice.id, bob.id)

    assert await graph.status(alice.id, bob.id) == FriendStatus.CONFIRMED
    assert await graph.edge_count() == 2


@pytest.mark.asyncio
async def test_withdraw_after_confirmation_demotes_reverse_edge(services, three_users):
    graph = services.users.friends
    alice, bob, _ = three_users
    await graph.request(alice.id, bob.id)
    await graph.request(bob.id, alice.id)

    await graph.withdraw(alice.id, bob.id)

    assert await graph.status(alice.id, bob.id) is None
    assert await graph.status(bob.id, alice.id) == FriendStatus.PENDING
    assert await graph.friends_of(alice.id) == set()
    assert await graph.friends_of(bob.id) == set()
    assert await graph.incoming_requests(alice.id) == {bob.id}


@pytest.mark.asyncio
async def test_withdraw_missing_edge_is_noop(services, three_users):
    graph = services.users.friends
    alice, bob, _ = three_users

    await graph.withdraw(alice.id, bob.id)

    assert await graph.edge_count() == 0


@pytest.mark.asyncio
async def test_withdraw_pending_request(services, three_users):
    graph = services.users.friends
    alice, bob, _ = three_users
    await graph.request(alice.id, bob.id)

    await graph.withdraw(alice.id, bob.id)

    assert await graph.edge_count() == 0


@pytest.mark.asyncio
async def test_self_request_rejected(services, three_users):
    alice, _, _ = three_users

    with pytest.raises(ValidationException):
        await services.users.friends.request(alice.id, alice.id)


@pytest.mark.asyncio
async def test_common_friends(services, three_users):
    graph = services.users.friends
    alice, bob, carol = three_users
    for a, b in ((alice, carol), (bob, carol)):
        await graph.request(a.id, b.id)
        await graph.request(b.id, a.id)

    assert await graph.common_friends(alice.id, bob.id) == {carol.id}
    assert await graph.common_friends(alice.id, carol.id) == set()


@pytest.mark.asyncio
async def test_concurrent_requests_end_confirmed():
    graph = InMemoryFriendshipGraph()

    await asyncio.gather(graph.request(1, 2), graph.request(2, 1), graph.request(1, 2))

    assert await graph.status(1, 2) == FriendStatus.CONFIRMED
    assert await graph.status(2, 1) == FriendStatus.CONFIRMED
    assert await graph.edge_count() == 2


@pytest.mark.asyncio
async def test_request_retries_when_edge_was_inserted_concurrently(session_maker, user_draft, monkeypatch):
    services = await build_services(Settings(STORAGE="database"), session_maker)
    alice, bob = [await services.users.create(user_draft(login)) for login in ("alice", "bob")]
    graph = services.users.friends
    await graph.request(alice.id, bob.id)

    real_find = _SessionEdges._find
    stale_reads = 2

    async def find(self, user_id, friend_id):
        # Первая попытка не видит ребро и упирается в уникальный ключ
        nonlocal stale_reads
        if (user_id, friend_id) == (alice.id, bob.id) and stale_reads:
            stale_reads -= 1
            return None
        return await real_find(self, user_id, friend_id)

    monkeypatch.setattr(_SessionEdges, "_find", find)

    status = await graph.request(alice.id, bob.id)

    assert status == FriendStatus.PENDING
    assert stale_reads == 0
    assert await graph.edge_count() == 1
