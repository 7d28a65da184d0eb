"""Test doubles and small helpers shared by unit and endpoint tests."""

import json

import httpx
from jose import jwt

from app.schemas.media import UploadedFile

AUTH_URL = "http://auth.test"
JWT_SECRET = "test-secret"


class FakeAuthService:
    """In-process stand-in for the Auth microservice, served through httpx.MockTransport."""

    def __init__(self):
        self.users = {}
        self.down = False
        self.calls = []

    def add_user(self, user_id: str, **fields) -> dict:
        self.users[user_id] = {"_id": user_id, **fields}
        return self.users[user_id]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))

        if self.down:
            return httpx.Response(503, json={"message": "Service unavailable"})

        if request.method == "POST" and path == "/api/auth/internal/users/batch":
            users = [self.users[i] for i in body["ids"] if i in self.users]
            return httpx.Response(200, json={"users": users})
        if request.method == "GET" and path.startswith("/api/auth/internal/users/"):
            user = self.users.get(path.rsplit("/", 1)[-1])
            if user is None:
                return httpx.Response(404, json={"message": "User not found"})
            return httpx.Response(200, json=user)
        if request.method == "PATCH" and path == "/api/auth/agent-status":
            return httpx.Response(200, json={"message": "updated"})
        return httpx.Response(404, json={"message": "Not found"})

    def calls_to(self, method: str, path: str) -> list:
        return [c for c in self.calls if c[0] == method and c[1] == path]


class FakeRedis:
    """Dict-backed subset of the redis.asyncio client used by the dashboard cache."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value

    async def delete(self, key):
        self.store.pop(key, None)


def make_token(user_id: str, role: str = "agent", secret: str = JWT_SECRET) -> str:
    return jwt.encode({"userId": user_id, "role": role}, secret, algorithm="HS256")


def auth_headers(user_id: str, role: str = "agent") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


def make_file(name: str, content: bytes, content_type: str = "image/jpeg") -> UploadedFile:
    return UploadedFile(filename=name, content_type=content_type, content=content)
