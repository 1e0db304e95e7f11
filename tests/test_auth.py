"""Registration, login and the current-user endpoint."""
from app.core.security import get_password_hash
from app.models.user import User
from conftest import bearer, make_driver


async def test_register_links_existing_driver(client, db):
    driver = make_driver(email="jane.doe@example.com")
    db.add(driver)
    await db.commit()

    response = await client.post(
        "/api/auth/register",
        json={"email": "jane.doe@example.com", "password": "s3cretpass", "name": "Jane Doe"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["user"]["role"] == "DRIVER"
    assert body["user"]["driver_id"] == str(driver.id)


async def test_register_without_driver_record(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "walk.in@example.com", "password": "s3cretpass", "name": "Walk In"},
    )
    assert response.status_code == 201
    assert response.json()["user"]["driver_id"] is None


async def test_register_rejects_duplicate_email(client, admin_user):
    response = await client.post(
        "/api/auth/register",
        json={"email": "ADMIN@example.com", "password": "s3cretpass", "name": "Copycat"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"


async def test_register_validates_payload(client):
    response = await client.post(
        "/api/auth/register", json={"email": "not-an-email", "password": "short", "name": "X"}
    )
    assert response.status_code == 422


async def test_login_and_me(client, admin_user):
    login = await client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "admin123"}
    )
    assert login.status_code == 200
    token = login.json()["access_token"]
    assert login.json()["user"]["role"] == "ADMIN"

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "admin@example.com"


async def test_login_with_wrong_password(client, admin_user):
    response = await client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "wrong-password"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Incorrect email or password"


async def test_login_inactive_user(client, db):
    user = User(
        email="gone@example.com",
        name="Gone",
        password_hash=get_password_hash("password1"),
        is_active=False,
    )
    db.add(user)
    await db.commit()
    response = await client.post("/api/auth/login", json={"email": "gone@example.com", "password": "password1"})
    assert response.status_code == 401
    assert response.json()["message"] == "User account is inactive"


async def test_me_rejects_missing_or_bad_token(client, admin_user):
    assert (await client.get("/api/auth/me")).status_code == 401
    bad = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401
    assert (await client.get("/api/auth/me", headers=bearer(admin_user))).status_code == 200
