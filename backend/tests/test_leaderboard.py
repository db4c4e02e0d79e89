"""
Tests for the token-count leaderboard.
"""
import asyncio

from conftest import add_content, add_user
from soulscribe.repositories import UnitOfWork
from soulscribe.services.leaderboard import rank


async def _give_tokens(session_factory, user, n):
    for i in range(n):
        content = await add_content(session_factory, user.id, text=f"{user.username} {i}")
        async with UnitOfWork(session_factory) as uow:
            await uow.tokens.create(user.id, content.id, f"{user.username}-{i}", "Content Creator", "n", "d")


def _board(session_factory, counts, limit):
    async def scenario():
        users = []
        for wallet, n in counts:
            user = await add_user(session_factory, wallet)
            await _give_tokens(session_factory, user, n)
            users.append(user)
        async with session_factory() as db:
            return users, await rank(db, limit)

    return asyncio.run(scenario())


def test_ranking_is_descending_by_token_count(session_factory):
    _, board = _board(session_factory, [("amy.near", 1), ("ben.near", 3), ("cat.near", 2)], 10)
    assert [(e.username, e.token_count) for e in board] == [("ben", 3), ("cat", 2), ("amy", 1)]
    assert board[0].near_wallet == "ben.near"


def test_users_without_tokens_are_absent(session_factory):
    _, board = _board(session_factory, [("amy.near", 0), ("ben.near", 1)], 10)
    assert [e.username for e in board] == ["ben"]


def test_limit_truncates_and_ties_are_stable(session_factory):
    users, board = _board(session_factory, [("amy.near", 2), ("ben.near", 2), ("cat.near", 2), ("dan.near", 5)], 3)
    assert len(board) == 3
    assert [e.username for e in board] == ["dan", "amy", "ben"]
    counts = [e.token_count for e in board]
    assert counts == sorted(counts, reverse=True)


def test_zero_limit_returns_nothing(session_factory):
    _, board = _board(session_factory, [("amy.near", 1)], 0)
    assert board == []


def test_negative_limit_returns_nothing(session_factory):
    _, board = _board(session_factory, [("amy.near", 1)], -3)
    assert board == []


def test_limit_is_capped(session_factory, monkeypatch):
    monkeypatch.setattr("soulscribe.services.leaderboard.MAX_LIMIT", 2)
    _, board = _board(session_factory, [("amy.near", 1), ("ben.near", 1), ("cat.near", 1)], 50)
    assert len(board) == 2


def test_empty_leaderboard(session_factory):
    _, board = _board(session_factory, [], 10)
    assert board == []
