from schemas import UserRole


NEW_USER = {
    "name": "Rohan Deshpande Kulkarni",
    "email": "rohan@mail.com",
    "address": "Flat 4, Shivaji Nagar, Pune",
    "password": "Strong#Pass1",
    "role": "admin",
}


def test_register_creates_normal_user_and_returns_token(client):
    res = client.post("/api/register", json=NEW_USER)
    assert res.status_code == 200
    body = res.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["email"] == "rohan@mail.com"
    # the requested role is ignored on self-registration
    assert body["user"]["role"] == "user"
    assert "passwordHash" not in body["user"]

    me = client.get("/api/user", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["name"] == NEW_USER["name"]


def test_register_duplicate_email(client, user_id):
    res = client.post("/api/register", json={**NEW_USER, "email": "ursula@mail.com"})
    assert res.status_code == 409
    assert res.json()["detail"] == "Email already registered"


def test_register_enforces_password_policy(client):
    res = client.post("/api/register", json={**NEW_USER, "password": "weakpass"})
    assert res.status_code == 422


def test_register_enforces_name_length(client):
    res = client.post("/api/register", json={**NEW_USER, "name": "Too Short"})
    assert res.status_code == 422


def test_login(client, user_id):
    res = client.post("/api/login", json={"email": "ursula@mail.com", "password": "Secret@123"})
    assert res.status_code == 200
    assert res.json()["user"]["id"] == user_id

    res = client.post("/api/login", json={"email": "ursula@mail.com", "password": "Wrong@123"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid email or password"


def test_requests_without_valid_token_are_rejected(client):
    assert client.get("/api/stores").status_code == 401
    res = client.get("/api/stores", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Could not validate credentials"


def test_admin_routes_require_admin(client, user_id, owner_id, auth_headers):
    for uid in (user_id, owner_id):
        res = client.get("/api/admin/users", headers=auth_headers(uid))
        assert res.status_code == 403
        assert res.json()["detail"] == "Insufficient permissions"


def test_admin_creates_owner_then_store(client, admin_id, auth_headers):
    headers = auth_headers(admin_id)
    res = client.post(
        "/api/admin/users",
        json={**NEW_USER, "email": "owner2@shops.com", "role": "owner"},
        headers=headers,
    )
    assert res.status_code == 200
    owner = res.json()
    assert owner["role"] == "owner"
    assert owner["storeRating"] is None

    res = client.post(
        "/api/admin/stores",
        json={
            "name": "Kulkarni General Provisions",
            "email": "provisions@shops.com",
            "address": "FC Road, Pune",
            "ownerId": owner["id"],
        },
        headers=headers,
    )
    assert res.status_code == 200
    store = res.json()
    assert store["ownerId"] == owner["id"]
    assert store["averageRating"] == 0.0
    assert store["totalRatings"] == 0
    assert store["userRating"] is None

    stores = client.get("/api/admin/stores", headers=headers).json()
    assert [s["id"] for s in stores] == [store["id"]]


def test_admin_create_user_duplicate_email(client, admin_id, user_id, auth_headers):
    res = client.post(
        "/api/admin/users",
        json={**NEW_USER, "email": "ursula@mail.com"},
        headers=auth_headers(admin_id),
    )
    assert res.status_code == 409
    assert res.json()["detail"] == "Email already exists"


def test_store_owner_must_have_owner_role(client, admin_id, user_id, auth_headers):
    res = client.post(
        "/api/admin/stores",
        json={
            "name": "Kulkarni General Provisions",
            "email": "provisions@shops.com",
            "address": "FC Road, Pune",
            "ownerId": user_id,
        },
        headers=auth_headers(admin_id),
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "ownerId must be a valid Store Owner"


def test_store_requires_owner_id(client, admin_id, auth_headers):
    res = client.post(
        "/api/admin/stores",
        json={"name": "Kulkarni General Provisions", "email": "provisions@shops.com", "address": "FC Road"},
        headers=auth_headers(admin_id),
    )
    assert res.status_code == 422


def test_rating_upsert_recomputes_average(client, make_user, make_store, owner_id, user_id, auth_headers):
    store_id = make_store(owner_id)
    other_id = make_user("Vikram Second Customer", "vikram@mail.com")

    res = client.post("/api/ratings", json={"storeId": store_id, "rating": 5}, headers=auth_headers(user_id))
    assert res.status_code == 200
    assert res.json()["rating"] == 5
    client.post("/api/ratings", json={"storeId": store_id, "rating": 3}, headers=auth_headers(other_id))

    stores = client.get("/api/stores", headers=auth_headers(user_id)).json()
    assert stores[0]["averageRating"] == 4.0
    assert stores[0]["totalRatings"] == 2
    assert stores[0]["userRating"] == 5

    # rating again replaces the earlier value
    client.post("/api/ratings", json={"storeId": store_id, "rating": 1}, headers=auth_headers(user_id))
    stores = client.get("/api/user/stores", headers=auth_headers(user_id)).json()
    assert stores[0]["averageRating"] == 2.0
    assert stores[0]["totalRatings"] == 2
    assert stores[0]["userRating"] == 1


def test_rating_validation(client, make_store, owner_id, user_id, auth_headers):
    store_id = make_store(owner_id)
    res = client.post("/api/ratings", json={"storeId": store_id, "rating": 6}, headers=auth_headers(user_id))
    assert res.status_code == 422
    res = client.post("/api/ratings", json={"storeId": "ffffffffffffffffffffffff", "rating": 4}, headers=auth_headers(user_id))
    assert res.status_code == 404
    assert res.json()["detail"] == "Store not found"
    res = client.post("/api/ratings", json={"storeId": "nope", "rating": 4}, headers=auth_headers(user_id))
    assert res.status_code == 400


def test_only_normal_users_rate(client, make_store, owner_id, auth_headers):
    store_id = make_store(owner_id)
    res = client.post("/api/ratings", json={"storeId": store_id, "rating": 4}, headers=auth_headers(owner_id))
    assert res.status_code == 403


def test_owner_sees_store_and_ratings(client, make_store, owner_id, user_id, auth_headers):
    store_id = make_store(owner_id)
    client.post("/api/ratings", json={"storeId": store_id, "rating": 4}, headers=auth_headers(user_id))

    store = client.get("/api/owner/store", headers=auth_headers(owner_id)).json()
    assert store["id"] == store_id
    assert store["averageRating"] == 4.0

    ratings = client.get("/api/owner/ratings", headers=auth_headers(owner_id)).json()
    assert len(ratings) == 1
    assert ratings[0]["userName"] == "Ursula Regular Customer"
    assert ratings[0]["userEmail"] == "ursula@mail.com"
    assert ratings[0]["rating"] == 4
    assert ratings[0]["createdAt"]


def test_owner_without_store(client, owner_id, auth_headers):
    res = client.get("/api/owner/store", headers=auth_headers(owner_id))
    assert res.status_code == 404
    assert res.json()["detail"] == "No store is assigned to this owner"
    assert client.get("/api/owner/ratings", headers=auth_headers(owner_id)).json() == []


def test_statistics_and_owner_store_rating(client, make_store, admin_id, owner_id, user_id, auth_headers):
    store_id = make_store(owner_id)
    client.post("/api/ratings", json={"storeId": store_id, "rating": 3}, headers=auth_headers(user_id))

    stats = client.get("/api/admin/statistics", headers=auth_headers(admin_id)).json()
    assert stats == {"totalUsers": 3, "totalStores": 1, "totalRatings": 1}

    users = client.get("/api/admin/users", headers=auth_headers(admin_id)).json()
    assert [u["name"] for u in users] == sorted(u["name"] for u in users)
    by_role = {u["role"]: u for u in users}
    assert by_role[UserRole.OWNER.value]["storeRating"] == 3.0
    assert by_role[UserRole.USER.value]["storeRating"] is None


def test_change_password(client, user_id, auth_headers):
    headers = auth_headers(user_id)
    res = client.post(
        "/api/change-password",
        json={"currentPassword": "Wrong@123", "newPassword": "Fresh#Pass9"},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Current password is incorrect"

    res = client.post(
        "/api/change-password",
        json={"currentPassword": "Secret@123", "newPassword": "Fresh#Pass9"},
        headers=headers,
    )
    assert res.status_code == 200
    login = client.post("/api/login", json={"email": "ursula@mail.com", "password": "Fresh#Pass9"})
    assert login.status_code == 200


def test_bootstrap_admin_once(client):
    res = client.post("/api/init/bootstrap")
    assert res.status_code == 200
    login = client.post("/api/login", json={"email": "admin@storeratings.com", "password": "Admin@123"})
    assert login.json()["user"]["role"] == "admin"

    res = client.post("/api/init/bootstrap")
    assert res.status_code == 400
    assert res.json()["detail"] == "Admin already exists"
