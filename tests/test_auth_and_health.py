from adwarden.core.security import create_access_token


def test_login_and_me(client, seed, login):
    seed.user("viewer@adwarden.io")

    response = client.get("/api/auth/me", headers=login("viewer@adwarden.io"))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "viewer@adwarden.io"
    assert data["role"] == "user"


def test_login_rejects_wrong_password(client, seed):
    seed.user("viewer@adwarden.io")

    response = client.post("/api/auth/login", json={"email": "viewer@adwarden.io", "password": "nope"})

    assert response.status_code == 401


def test_login_rejects_inactive_user(client, seed):
    seed.user("banned@adwarden.io", is_active=False)

    response = client.post("/api/auth/login", json={"email": "banned@adwarden.io", "password": "pass1234"})

    assert response.status_code == 403


def test_me_requires_valid_token(client, seed):
    user = seed.user("viewer@adwarden.io")

    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401

    token = create_access_token(subject=user.id)
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200


def test_token_of_deactivated_user_is_refused(client, seed):
    user = seed.user("viewer@adwarden.io")
    token = create_access_token(subject=user.id)
    user.is_active = False
    seed.session.commit()

    response = client.get("/api/realtime/count", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_db(client):
    assert client.get("/api/health/db").json() == {"status": "healthy", "database": "connected"}


def test_health_redis_without_redis(client):
    assert client.get("/api/health/redis").json() == {"status": "degraded", "redis": "unavailable"}
