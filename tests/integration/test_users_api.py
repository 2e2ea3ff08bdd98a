"""Integration tests: registration and login via API."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_id_and_lowercase_name(self, client: AsyncClient):
        response = await client.post("/api/register", json={"username": "Alice"})
        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "alice"
        assert len(data["id"]) == 16

    @pytest.mark.asyncio
    async def test_register_too_short(self, client: AsyncClient):
        response = await client.post("/api/register", json={"username": "a"})
        assert response.status_code == 400
        assert response.json() == {"detail": "username too short"}

    @pytest.mark.asyncio
    async def test_register_missing_username(self, client: AsyncClient):
        response = await client.post("/api/register", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_register_taken_case_insensitive(self, client: AsyncClient):
        first = await client.post("/api/register", json={"username": "bob"})
        assert first.status_code == 200
        response = await client.post("/api/register", json={"username": "BOB"})
        assert response.status_code == 409
        assert response.json() == {"detail": "username taken"}


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_existing_user(self, client: AsyncClient):
        registered = (await client.post("/api/register", json={"username": "carol"})).json()
        response = await client.post("/api/login", json={"username": "Carol"})
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == registered["id"]
        assert data["username"] == "carol"
        assert data["created_at"] is not None

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, client: AsyncClient):
        response = await client.post("/api/login", json={"username": "nobody"})
        assert response.status_code == 404
        assert response.json() == {"detail": "user not found"}
