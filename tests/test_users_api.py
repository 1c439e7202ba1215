from sqlalchemy import func, select

from tifpoint.models import Activity, ActivityStatus, User, UserRole

from conftest import TEST_PASSWORD, auth_headers, make_activity, make_user


async def test_admin_lists_users_with_filters(client, db, student, admin):
    await make_user(db, "siti", nim="2200555")

    res = await client.get("/api/users", headers=auth_headers(admin))
    assert res.status_code == 200
    users = res.json()
    assert {u["username"] for u in users} == {"student", "admin", "siti"}
    assert all("password_hash" not in u for u in users)

    res = await client.get("/api/users", params={"nim": "2200"}, headers=auth_headers(admin))
    assert [u["username"] for u in res.json()] == ["siti"]

    res = await client.get("/api/users", params={"role": "ADMIN"}, headers=auth_headers(admin))
    assert [u["username"] for u in res.json()] == ["admin"]

    res = await client.get("/api/users", params={"search": "SITI@"}, headers=auth_headers(admin))
    assert [u["username"] for u in res.json()] == ["siti"]


async def test_list_users_newest_first(client, db, admin):
    first = await make_user(db, "first")
    second = await make_user(db, "second")

    res = await client.get("/api/users", params={"role": "MAHASISWA"}, headers=auth_headers(admin))
    ids = [u["id"] for u in res.json()]
    assert ids.index(second.id) < ids.index(first.id)


async def test_list_users_is_admin_only(client, student):
    res = await client.get("/api/users", headers=auth_headers(student))
    assert res.status_code == 403


async def test_get_user(client, db, student, admin):
    other = await make_user(db, "other")

    res = await client.get(f"/api/users/{student.id}", headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["nim"] == "2100001"

    assert (await client.get(f"/api/users/{other.id}", headers=auth_headers(student))).status_code == 403
    assert (await client.get(f"/api/users/{other.id}", headers=auth_headers(admin))).status_code == 200

    res = await client.get("/api/users/424242", headers=auth_headers(admin))
    assert res.status_code == 404
    assert res.json()["detail"] == "User not found"


async def test_user_updates_own_profile_and_password(client, student):
    res = await client.patch(
        f"/api/users/{student.id}",
        json={"name": "Student Baru", "password": "changed-pass"},
        headers=auth_headers(student),
    )
    assert res.status_code == 200
    assert res.json()["user"]["name"] == "Student Baru"

    old = await client.post("/api/auth/login", json={"email": student.email, "password": TEST_PASSWORD})
    assert old.status_code == 400
    new = await client.post("/api/auth/login", json={"email": student.email, "password": "changed-pass"})
    assert new.status_code == 200


async def test_student_cannot_change_own_role(client, student):
    res = await client.patch(f"/api/users/{student.id}", json={"role": "ADMIN"}, headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["user"]["role"] == "MAHASISWA"


async def test_admin_changes_role(client, student, admin):
    res = await client.patch(f"/api/users/{student.id}", json={"role": "ADMIN"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["user"]["role"] == "ADMIN"


async def test_update_other_user_is_forbidden(client, db, student):
    other = await make_user(db, "other")
    res = await client.patch(f"/api/users/{other.id}", json={"name": "Hacked"}, headers=auth_headers(student))
    assert res.status_code == 403
    assert res.json()["detail"] == "Unauthorized to update this user"


async def test_update_rejects_duplicates(client, db, student):
    await make_user(db, "other", nim="2100777")
    url = f"/api/users/{student.id}"

    res = await client.patch(url, json={"email": "OTHER@example.com"}, headers=auth_headers(student))
    assert res.status_code == 400
    assert res.json()["detail"] == "Email already in use"

    res = await client.patch(url, json={"username": "other"}, headers=auth_headers(student))
    assert res.json()["detail"] == "Username already in use"

    res = await client.patch(url, json={"nim": "2100777"}, headers=auth_headers(student))
    assert res.json()["detail"] == "NIM already in use"

    # keeping one's own values is not a duplicate
    res = await client.patch(url, json={"email": student.email, "nim": "2100001"}, headers=auth_headers(student))
    assert res.status_code == 200


async def test_admin_deletes_user_with_activities(client, db, reference, student, admin):
    await make_activity(
        db, student, reference["competencies"]["Soft Skills"].id, reference["types"]["Seminar"].id,
        ActivityStatus.PENDING,
    )

    res = await client.delete(f"/api/users/{student.id}", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["message"] == "User deleted successfully"

    db.expire_all()
    assert (await db.execute(select(User).where(User.id == student.id))).scalar_one_or_none() is None
    remaining = (await db.execute(select(func.count(Activity.id)))).scalar()
    assert remaining == 0

    res = await client.delete(f"/api/users/{student.id}", headers=auth_headers(admin))
    assert res.status_code == 404


async def test_delete_user_is_admin_only(client, db, student):
    other = await make_user(db, "other", role=UserRole.MAHASISWA)
    res = await client.delete(f"/api/users/{other.id}", headers=auth_headers(student))
    assert res.status_code == 403
