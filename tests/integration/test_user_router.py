"""Integration tests for signup and login endpoints."""

import pytest


class TestSignup:
    async def test_signup(self, client):
        resp = await client.post("/user/signup", json={
            "username": "alice", "email": "alice@example.com", "password": "pw-123",
        })
        assert resp.status_code == 201
        data = resp.json()
        assert data["username"] == "alice"
        assert data["email"] == "alice@example.com"
        assert "password" not in data
        assert "password_hash" not in data

    async def test_duplicate_email(self, client):
        body = {"username": "alice", "email": "alice@example.com", "password": "pw"}
        await client.post("/user/signup", json=body)
        resp = await client.post("/user/signup", json={**body, "username": "alicia"})
        assert resp.status_code == 409
        assert resp.json()["code"] == "CONFLICT"

    async def test_missing_field(self, client):
        resp = await client.post("/user/signup", json={"username": "alice", "email": "a@example.com"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    async def test_blank_field(self, client):
        resp = await client.post("/user/signup", json={
            "username": "  ", "email": "a@example.com", "password": "pw",
        })
        assert resp.status_code == 400


class TestLogin:
    async def test_login(self, client):
        await client.post("/user/signup", json={
            "username": "alice", "email": "alice@example.com", "password": "pw-123",
        })
        resp = await client.post("/user/login", json={
            "email": "alice@example.com", "password": "pw-123",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["token"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600

    async def test_wrong_password(self, client):
        await client.post("/user/signup", json={
            "username": "alice", "email": "alice@example.com", "password": "pw-123",
        })
        wrong = await client.post("/user/login", json={
            "email": "alice@example.com", "password": "nope",
        })
        unknown = await client.post("/user/login", json={
            "email": "bob@example.com", "password": "pw-123",
        })
        assert wrong.status_code == 401
        assert unknown.status_code == 401
        assert wrong.json() == unknown.json()

    async def test_missing_password(self, client):
        resp = await client.post("/user/login", json={"email": "alice@example.com"})
        assert resp.status_code == 400
