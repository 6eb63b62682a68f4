from pymongo.errors import ServerSelectionTimeoutError

from conftest import BrokenCollection, SlowCollection

ALICE = {"name": "Alice", "email": "a@x.com", "username": "alice", "password": "s3cret"}
HTML = {"accept": "text/html,application/xhtml+xml"}


def test_home_page_links_to_form_and_listing(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'href="/form"' in response.text
    assert 'href="/registered-users"' in response.text


def test_form_page_posts_all_fields(client):
    response = client.get("/form")
    assert response.status_code == 200
    assert 'action="/register"' in response.text
    for field in ("name", "username", "email", "password"):
        assert f'name="{field}"' in response.text


def test_register_form_then_listing(client, users_collection):
    response = client.post("/register", data=ALICE)
    assert response.status_code == 201
    assert response.text == "User created successfully"

    response = client.get("/registered-users")
    assert response.status_code == 200
    assert "Alice" in response.text
    assert "a@x.com" in response.text
    assert "s3cret" not in response.text
    assert users_collection.documents[0]["password_hash"] not in response.text


def test_listing_escapes_user_input(client):
    client.post("/register", data={**ALICE, "name": "<script>alert(1)</script>"})

    response = client.get("/registered-users")
    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;" in response.text


def test_empty_listing(client):
    response = client.get("/registered-users")
    assert response.status_code == 200
    assert "No users registered yet." in response.text


def test_duplicate_form_registration_returns_conflict(client):
    client.post("/register", data=ALICE)

    response = client.post("/register", data={**ALICE, "email": "other@x.com"})
    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "USER_ALREADY_EXISTS"
    assert data["details"] == {"fields": ["username"]}


def test_duplicate_form_registration_renders_error_page_for_browsers(client):
    client.post("/register", data=ALICE)

    response = client.post("/register", data=ALICE, headers=HTML)
    assert response.status_code == 409
    assert response.headers["content-type"].startswith("text/html")
    assert "User already exists" in response.text


def test_missing_form_field_is_a_validation_error(client, users_collection):
    response = client.post("/register", data={"name": "Alice", "email": "a@x.com"})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert users_collection.insert_calls == 0


def test_blank_form_field_is_a_validation_error(client, users_collection):
    response = client.post("/register", data={**ALICE, "username": "   "})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert users_collection.insert_calls == 0


def test_store_failure_is_an_internal_error(client_for):
    client = client_for(BrokenCollection(ServerSelectionTimeoutError("no servers available")))

    response = client.post("/register", data=ALICE)
    assert response.status_code == 500
    assert response.json()["code"] == "STORE_ERROR"

    response = client.get("/registered-users", headers=HTML)
    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/html")


def test_slow_store_times_out(client_for):
    client = client_for(SlowCollection())

    response = client.get("/api/v1/users")
    assert response.status_code == 500
    assert response.json()["code"] == "STORE_ERROR"


def test_json_api_register_and_list(client):
    response = client.post("/api/v1/users", json=ALICE)
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "User created successfully"
    assert data["user_id"]

    response = client.get("/api/v1/users")
    assert response.status_code == 200
    assert response.json() == [{"name": "Alice", "email": "a@x.com", "username": "alice"}]


def test_json_api_duplicate(client):
    client.post("/api/v1/users", json=ALICE)

    response = client.post("/api/v1/users", json={**ALICE, "username": "alice2"})
    assert response.status_code == 409
    assert response.json()["details"] == {"fields": ["email"]}


def test_json_api_requires_every_field(client):
    response = client.post("/api/v1/users", json={"name": "Alice"})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_liveness_and_unready_without_database(client):
    assert client.get("/live").json() == {"status": "alive"}

    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["reason"] == "database_unavailable"


def test_process_time_header(client):
    response = client.get("/live")
    assert "x-process-time" in response.headers


def test_validation_errors_never_echo_the_password(client):
    response = client.post(
        "/api/v1/users",
        json={"name": "Alice", "username": "alice", "password": "topsecretpw"},
    )
    assert response.status_code == 422
    assert "topsecretpw" not in response.text
    assert response.json()["details"][0]["loc"] == ["body", "email"]

    response = client.post("/register", data={**ALICE, "password": "topsecretpw", "username": " "})
    assert response.status_code == 422
    assert "topsecretpw" not in response.text
