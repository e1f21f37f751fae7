import uuid

from app.models.enums import AppRole
from app.models.rating import Rating

NEW_STORE = {
    "name": "Riverside Grocery",
    "email": "Riverside@Example.com",
    "address": "1 River Road",
}


def test_create_store_promotes_owner(client, db, admin, normal_user, auth_headers):
    response = client.post(
        "/api/stores",
        json={**NEW_STORE, "ownerId": str(normal_user.id)},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    store = response.json()["store"]
    assert store["email"] == "riverside@example.com"
    assert store["owner_id"] == str(normal_user.id)

    db.refresh(normal_user)
    assert normal_user.role == AppRole.store_owner


def test_create_store_with_unknown_owner(client, admin, auth_headers):
    response = client.post(
        "/api/stores",
        json={**NEW_STORE, "ownerId": str(uuid.uuid4())},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Owner not found"


def test_create_store_duplicate_email(client, admin, owner, make_store, auth_headers):
    make_store(owner, email="riverside@example.com")

    response = client.post(
        "/api/stores",
        json={**NEW_STORE, "ownerId": str(owner.id)},
        headers=auth_headers(admin),
    )

    assert response.status_code == 409
    assert response.json()["error"] == "Store with this email already exists"


def test_create_store_requires_admin(client, owner, auth_headers):
    response = client.post(
        "/api/stores",
        json={**NEW_STORE, "ownerId": str(owner.id)},
        headers=auth_headers(owner),
    )

    assert response.status_code == 403


def test_create_store_requires_address(client, admin, owner, auth_headers):
    response = client.post(
        "/api/stores",
        json={**NEW_STORE, "address": "   ", "ownerId": str(owner.id)},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "address"


def test_unrated_store_has_zero_average(client, owner, normal_user, make_store, auth_headers):
    store = make_store(owner)

    response = client.get(f"/api/stores/{store.id}", headers=auth_headers(normal_user))

    assert response.status_code == 200
    body = response.json()["store"]
    assert body["average_rating"] == 0
    assert body["total_ratings"] == 0
    assert body["user_rating"] is None


def test_get_store_includes_callers_rating(client, owner, normal_user, make_user, make_store, make_rating, auth_headers):
    store = make_store(owner)
    make_rating(normal_user, store, 2)
    make_rating(make_user(), store, 5)

    body = client.get(f"/api/stores/{store.id}", headers=auth_headers(normal_user)).json()["store"]

    assert body["average_rating"] == 3.5
    assert body["total_ratings"] == 2
    assert body["user_rating"] == 2


def test_get_store_not_found(client, normal_user, auth_headers):
    response = client.get(f"/api/stores/{uuid.uuid4()}", headers=auth_headers(normal_user))

    assert response.status_code == 404


def test_list_stores_search_matches_name_or_address(client, owner, normal_user, make_store, auth_headers):
    make_store(owner, name="Bakery Central", address="5 Oak Street")
    make_store(owner, name="Hardware Hub", address="2 Bakery Lane")
    make_store(owner, name="Fish Market", address="8 Pier Road")

    response = client.get("/api/stores", params={"search": "bakery"}, headers=auth_headers(normal_user))

    names = sorted(store["name"] for store in response.json()["stores"])
    assert names == ["Bakery Central", "Hardware Hub"]
    assert response.json()["pagination"]["totalCount"] == 2


def test_list_stores_sorted_by_average_rating(client, owner, normal_user, make_user, make_store, make_rating, auth_headers):
    low = make_store(owner, name="Low Rated")
    high = make_store(owner, name="High Rated")
    make_store(owner, name="Never Rated")
    make_rating(normal_user, low, 2)
    make_rating(normal_user, high, 5)
    make_rating(make_user(), high, 4)

    response = client.get(
        "/api/stores",
        params={"sortBy": "average_rating", "sortOrder": "desc"},
        headers=auth_headers(normal_user),
    )

    stores = response.json()["stores"]
    assert [store["name"] for store in stores] == ["High Rated", "Low Rated", "Never Rated"]
    assert [store["average_rating"] for store in stores] == [4.5, 2.0, 0]
    assert [store["user_rating"] for store in stores] == [5, 2, None]


def test_list_stores_requires_token(client):
    assert client.get("/api/stores").status_code == 401


def test_my_stores_lists_only_own_stores(client, owner, make_user, make_store, auth_headers):
    other_owner = make_user(role=AppRole.store_owner)
    make_store(owner, name="Mine")
    make_store(other_owner, name="Theirs")

    response = client.get("/api/stores/my-stores", headers=auth_headers(owner))

    assert response.status_code == 200
    assert [store["name"] for store in response.json()["stores"]] == ["Mine"]


def test_my_stores_is_for_store_owners(client, normal_user, auth_headers):
    assert client.get("/api/stores/my-stores", headers=auth_headers(normal_user)).status_code == 403


def test_owner_can_update_own_store(client, owner, make_store, auth_headers):
    store = make_store(owner)

    response = client.put(f"/api/stores/{store.id}", json={"name": "Renamed Store"}, headers=auth_headers(owner))

    assert response.status_code == 200
    assert response.json()["store"]["name"] == "Renamed Store"
    assert response.json()["store"]["email"] == store.email


def test_owner_cannot_update_someone_elses_store(client, owner, make_user, make_store, auth_headers):
    other_owner = make_user(role=AppRole.store_owner)
    store = make_store(other_owner)

    response = client.put(f"/api/stores/{store.id}", json={"name": "Hijacked"}, headers=auth_headers(owner))

    assert response.status_code == 403
    assert response.json()["error"] == "Access denied. You can only access your own store."


def test_normal_user_cannot_update_store(client, owner, normal_user, make_store, auth_headers):
    store = make_store(owner)

    response = client.put(f"/api/stores/{store.id}", json={"name": "Hijacked"}, headers=auth_headers(normal_user))

    assert response.status_code == 403


def test_admin_update_missing_store(client, admin, auth_headers):
    response = client.put(f"/api/stores/{uuid.uuid4()}", json={"name": "Ghost"}, headers=auth_headers(admin))

    assert response.status_code == 404


def test_update_store_email_taken(client, admin, owner, make_store, auth_headers):
    store = make_store(owner)
    other = make_store(owner)

    response = client.put(f"/api/stores/{store.id}", json={"email": other.email}, headers=auth_headers(admin))

    assert response.status_code == 409
    assert response.json()["error"] == "Email is already taken"


def test_delete_store_removes_its_ratings(client, db, admin, owner, normal_user, make_store, make_rating, auth_headers):
    store = make_store(owner)
    kept = make_store(owner)
    make_rating(normal_user, store, 3)
    make_rating(normal_user, kept, 4)

    response = client.delete(f"/api/stores/{store.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert [r.store_id for r in db.query(Rating).all()] == [kept.id]
    assert client.get(f"/api/stores/{store.id}", headers=auth_headers(admin)).status_code == 404
