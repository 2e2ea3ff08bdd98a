"""Integration tests: group creation, joining and listing."""

from __future__ import annotations

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from lockedin.db.models import Group, GroupMember, Streak
from lockedin.groups.service import create_group as create_group_service
from lockedin.groups.service import join_group as join_group_service
from tests.conftest import create_group, join, register


async def _count(session_factory, model, **filters) -> int:
    async with session_factory() as db:
        stmt = select(func.count()).select_from(model)
        for column, value in filters.items():
            stmt = stmt.where(getattr(model, column) == value)
        return (await db.execute(stmt)).scalar_one()


class TestCreateGroup:
    @pytest.mark.asyncio
    async def test_create_group(self, client: AsyncClient, session_factory):
        alice = await register(client, "alice")
        group = await create_group(client, alice["id"], "Focus", ["reddit.com", "YouTube.com"])

        assert set(group) == {"id", "name", "invite_code"}
        assert group["name"] == "Focus"
        assert len(group["invite_code"]) == 6
        assert group["invite_code"] == group["invite_code"].upper()

        assert await _count(session_factory, GroupMember, group_id=group["id"]) == 1
        assert await _count(session_factory, Streak, group_id=group["id"]) == 1

    @pytest.mark.asyncio
    async def test_creator_streak_starts_active(self, client: AsyncClient, session_factory):
        alice = await register(client, "alice")
        group = await create_group(client, alice["id"], "Focus", [])
        async with session_factory() as db:
            streak = (
                await db.execute(select(Streak).where(Streak.group_id == group["id"]))
            ).scalar_one()
        assert streak.user_id == alice["id"]
        assert streak.broken_at is None
        assert streak.started_at is not None

    @pytest.mark.asyncio
    async def test_sites_are_normalized(self, client: AsyncClient):
        alice = await register(client, "alice")
        group = await create_group(client, alice["id"], "Focus", ["WWW.Reddit.com", "reddit.com", "x.com"])
        board = (await client.get(f"/api/leaderboard/{group['id']}")).json()
        assert board["sites"] == ["reddit.com", "x.com"]

    @pytest.mark.asyncio
    async def test_create_group_unknown_user(self, client: AsyncClient, session_factory):
        response = await client.post("/api/groups", json={"name": "Ghost", "userId": "nope", "sites": []})
        assert response.status_code == 404
        assert await _count(session_factory, Group) == 0

    @pytest.mark.asyncio
    async def test_create_group_missing_name(self, client: AsyncClient):
        alice = await register(client, "alice")
        response = await client.post("/api/groups", json={"userId": alice["id"], "sites": []})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_invite_collision_is_retried(self, client: AsyncClient, session_factory, monkeypatch):
        """A code taken between the uniqueness check and the insert is regenerated silently."""
        alice = await register(client, "alice")
        first = await create_group(client, alice["id"], "First", [])

        codes = iter([first["invite_code"], "ZZZ999"])

        async def _racy_code(_db):
            return next(codes)

        monkeypatch.setattr("lockedin.groups.service.generate_unique_invite_code", _racy_code)

        async with session_factory() as db:
            group = await create_group_service(db, "Second", alice["id"], ["reddit.com"])
            await db.commit()

        assert group.invite_code == "ZZZ999"
        assert await _count(session_factory, Group) == 2
        assert await _count(session_factory, GroupMember, group_id=group.id) == 1
        assert await _count(session_factory, Streak, group_id=group.id) == 1


class TestJoinGroup:
    @pytest.mark.asyncio
    async def test_join_case_insensitive(self, client: AsyncClient, session_factory):
        alice = await register(client, "alice")
        bob = await register(client, "bob")
        group = await create_group(client, alice["id"], "Focus", ["reddit.com"])

        joined = await join(client, bob["id"], group["invite_code"].lower())

        assert joined["id"] == group["id"]
        assert joined["name"] == "Focus"
        assert joined["created_by"] == alice["id"]
        assert await _count(session_factory, GroupMember, group_id=group["id"]) == 2
        assert await _count(session_factory, Streak, group_id=group["id"]) == 2

    @pytest.mark.asyncio
    async def test_join_invalid_code(self, client: AsyncClient):
        bob = await register(client, "bob")
        response = await client.post("/api/groups/join", json={"code": "NOPE00", "userId": bob["id"]})
        assert response.status_code == 404
        assert response.json() == {"detail": "invalid code"}

    @pytest.mark.asyncio
    async def test_join_unknown_user(self, client: AsyncClient):
        alice = await register(client, "alice")
        group = await create_group(client, alice["id"], "Focus", [])
        response = await client.post("/api/groups/join", json={"code": group["invite_code"], "userId": "ghost"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_duplicate_join_is_idempotent(self, client: AsyncClient, session_factory):
        alice = await register(client, "alice")
        bob = await register(client, "bob")
        group = await create_group(client, alice["id"], "Focus", ["reddit.com"])

        first = await join(client, bob["id"], group["invite_code"])
        second = await join(client, bob["id"], group["invite_code"])

        assert first == second
        assert await _count(session_factory, GroupMember, group_id=group["id"], user_id=bob["id"]) == 1
        assert await _count(session_factory, Streak, group_id=group["id"], user_id=bob["id"]) == 1

    @pytest.mark.asyncio
    async def test_rejoin_does_not_reset_broken_streak(self, client: AsyncClient, session_factory):
        alice = await register(client, "alice")
        bob = await register(client, "bob")
        group = await create_group(client, alice["id"], "Focus", ["reddit.com"])
        await join(client, bob["id"], group["invite_code"])
        await client.post("/api/violation", json={"userId": bob["id"], "domain": "reddit.com"})

        await join(client, bob["id"], group["invite_code"])

        async with session_factory() as db:
            streak = (
                await db.execute(
                    select(Streak).where(Streak.group_id == group["id"], Streak.user_id == bob["id"])
                )
            ).scalar_one()
        assert streak.broken_at is not None

    @pytest.mark.asyncio
    async def test_creator_joining_own_group(self, client: AsyncClient, session_factory):
        alice = await register(client, "alice")
        group = await create_group(client, alice["id"], "Focus", [])
        async with session_factory() as db:
            rejoined = await join_group_service(db, group["invite_code"], alice["id"])
            await db.commit()
        assert rejoined.id == group["id"]
        assert await _count(session_factory, Streak, group_id=group["id"]) == 1


class TestListGroups:
    @pytest.mark.asyncio
    async def test_list_groups_for_user(self, client: AsyncClient):
        alice = await register(client, "alice")
        bob = await register(client, "bob")
        g1 = await create_group(client, alice["id"], "Focus", [])
        g2 = await create_group(client, bob["id"], "Deep Work", [])
        await join(client, alice["id"], g2["invite_code"])

        response = await client.get(f"/api/groups/{alice['id']}")
        assert response.status_code == 200
        groups = response.json()
        assert [g["id"] for g in groups] == [g1["id"], g2["id"]]
        assert all(g["joined_at"] is not None for g in groups)

    @pytest.mark.asyncio
    async def test_list_groups_unknown_user_is_empty(self, client: AsyncClient):
        response = await client.get("/api/groups/nobody")
        assert response.status_code == 200
        assert response.json() == []


class TestConcurrentJoins:
    @pytest.mark.asyncio
    async def test_concurrent_duplicate_joins(self, client: AsyncClient, session_factory):
        """The same join submitted five times at once yields one membership and one streak."""
        alice = await register(client, "alice")
        bob = await register(client, "bob")
        group = await create_group(client, alice["id"], "Focus", ["reddit.com"])

        responses = await asyncio.gather(
            *(
                client.post("/api/groups/join", json={"code": group["invite_code"], "userId": bob["id"]})
                for _ in range(5)
            )
        )

        assert [r.status_code for r in responses] == [200] * 5
        assert {r.json()["id"] for r in responses} == {group["id"]}
        assert await _count(session_factory, GroupMember, group_id=group["id"], user_id=bob["id"]) == 1
        assert await _count(session_factory, Streak, group_id=group["id"], user_id=bob["id"]) == 1

    @pytest.mark.asyncio
    async def test_concurrent_joins_by_different_users(self, client: AsyncClient, session_factory):
        alice = await register(client, "alice")
        group = await create_group(client, alice["id"], "Focus", [])
        others = [await register(client, name) for name in ("ben", "cat", "dan", "eve")]

        responses = await asyncio.gather(*(join(client, u["id"], group["invite_code"]) for u in others))

        assert {r["id"] for r in responses} == {group["id"]}
        assert await _count(session_factory, GroupMember, group_id=group["id"]) == 5
        assert await _count(session_factory, Streak, group_id=group["id"]) == 5
