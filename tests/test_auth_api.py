from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from tifpoint.core.reset_tokens import hash_token
from tifpoint.models import ActivityStatus, User

from conftest import TEST_PASSWORD, auth_headers, make_activity

REGISTER_BODY = {
    "username": "budi",
    "email": "Budi@Example.com",
    "password": "secret123",
    "name": "Budi Santoso",
    "nim": "2100123",
}


async def test_register_creates_student(client):
    res = await client.post("/api/auth/register", json=REGISTER_BODY)
    assert res.status_code == 201
    user = res.json()["user"]
    assert user["email"] == "budi@example.com"
    assert user["role"] == "MAHASISWA"
    assert "password_hash" not in user


async def test_register_rejects_duplicates(client):
    assert (await client.post("/api/auth/register", json=REGISTER_BODY)).status_code == 201

    res = await client.post("/api/auth/register", json=REGISTER_BODY)
    assert res.status_code == 400
    assert res.json()["detail"] == "Email already in use"

    res = await client.post("/api/auth/register", json={**REGISTER_BODY, "email": "other@example.com"})
    assert res.json()["detail"] == "Username already in use"

    res = await client.post(
        "/api/auth/register",
        json={**REGISTER_BODY, "email": "other@example.com", "username": "other"},
    )
    assert res.json()["detail"] == "NIM already in use"


async def test_register_validates_password_length(client):
    res = await client.post("/api/auth/register", json={**REGISTER_BODY, "password": "123"})
    assert res.status_code == 422


async def test_login_and_profile(client, db, reference, student):
    comp = reference["competencies"]["Soft Skills"].id
    await make_activity(db, student, comp, reference["types"]["Course"].id, ActivityStatus.APPROVED, 6)

    res = await client.post("/api/auth/login", json={"email": student.email, "password": TEST_PASSWORD})
    assert res.status_code == 200
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == student.id

    res = await client.get(
        "/api/auth/profile",
        headers={"Authorization": f"Bearer {body['access_token']}"},
    )
    assert res.status_code == 200
    profile = res.json()
    assert profile["username"] == "student"
    assert profile["statistics"]["total_points"] == 6
    assert profile["statistics"]["remaining_points"] == 30


async def test_admin_profile_has_no_statistics(client, admin):
    res = await client.get("/api/auth/profile", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["statistics"] is None


async def test_login_failures_share_one_message(client, student):
    wrong = await client.post("/api/auth/login", json={"email": student.email, "password": "bad-password"})
    unknown = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
    assert wrong.status_code == unknown.status_code == 400
    assert wrong.json()["detail"] == unknown.json()["detail"] == "Invalid credentials"


async def test_profile_requires_token(client):
    assert (await client.get("/api/auth/profile")).status_code == 401
    res = await client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid or missing token"


async def test_forgot_password_unknown_email_is_generic(client):
    res = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert res.status_code == 200
    body = res.json()
    assert body["reset_token"] is None
    assert "If your email is registered" in body["message"]


async def test_password_reset_flow(client, db, student):
    res = await client.post("/api/auth/forgot-password", json={"email": student.email})
    assert res.status_code == 200
    token = res.json()["reset_token"]
    assert token

    await db.refresh(student)
    assert student.reset_password_token == hash_token(token)

    res = await client.post("/api/auth/reset-password", json={"token": token, "new_password": "brand-new"})
    assert res.status_code == 200

    res = await client.post("/api/auth/login", json={"email": student.email, "password": "brand-new"})
    assert res.status_code == 200

    # single use
    res = await client.post("/api/auth/reset-password", json={"token": token, "new_password": "again-new"})
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid or expired reset token"


async def test_expired_reset_token_is_rejected(client, db, student):
    res = await client.post("/api/auth/forgot-password", json={"email": student.email})
    token = res.json()["reset_token"]

    user = (await db.execute(select(User).where(User.id == student.id))).scalar_one()
    user.reset_password_expires = datetime.now(timezone.utc) - timedelta(minutes=1)
    await db.commit()

    res = await client.post("/api/auth/reset-password", json={"token": token, "new_password": "brand-new"})
    assert res.status_code == 400
