import pytest
from fastapi import HTTPException
from jose import jwt

from core.config import settings
from core.security import decode_user_id
from factories import auth_headers


def test_decode_user_id_reads_claim():
    token = auth_headers(42)["Authorization"].split(" ", 1)[1]
    assert decode_user_id(token) == 42


def test_decode_user_id_rejects_foreign_signature():
    token = jwt.encode({"user_id": 42}, "another-secret", algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(HTTPException) as exc_info:
        decode_user_id(token)
    assert exc_info.value.status_code == 401


def test_decode_user_id_requires_user_claim():
    token = jwt.encode({"sub": "42"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(HTTPException):
        decode_user_id(token)


async def test_mutation_without_token_is_rejected(client):
    response = await client.post("/tweets/", json={"content": "hi"})
    assert response.status_code == 401
    assert response.json()["status"] == 401


async def test_unknown_user_token_is_rejected(client):
    response = await client.get("/users/me", headers=auth_headers(123))
    assert response.status_code == 401
