"""
Postboard Backend: HTTP API Tests
===================================

What:  End-to-end requests through the FastAPI app (middleware, handlers,
       services, SQLite).
How:   HTTPX AsyncClient over ASGITransport; see conftest.test_client.

What we test:
    ✅ register → login → me flow and the success envelope
    ✅ bearer token required for users, drafts and writes (401 + header)
    ✅ 404 / 409 / 422 error envelopes carry the request id
    ✅ post CRUD, publish and the published/drafts scopes
    ✅ health check and X-Request-ID propagation
"""

import pytest


REGISTER_BODY = {
    "name": "Ann Author",
    "email": "ann@example.com",
    "password": "Secret123",
    "password_confirmation": "Secret123",
}


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/")
        assert response.headers.get("X-Request-ID")


class TestAuthFlow:
    @pytest.mark.asyncio
    async def test_register_login_me(self, test_client):
        registered = await test_client.post("/api/auth/register", json=REGISTER_BODY)
        assert registered.status_code == 201
        body = registered.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "ann@example.com"
        assert "password" not in body["data"]["user"]

        login = await test_client.post(
            "/api/auth/login", json={"email": "ANN@example.com", "password": "Secret123"}
        )
        assert login.status_code == 200
        token = login.json()["data"]["access_token"]

        me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["name"] == "Ann Author"

    @pytest.mark.asyncio
    async def test_bad_credentials(self, test_client):
        await test_client.post("/api/auth/register", json=REGISTER_BODY)
        response = await test_client.post(
            "/api/auth/login", json={"email": "ann@example.com", "password": "Wrong123"}
        )
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_duplicate_registration_conflicts(self, test_client):
        await test_client.post("/api/auth/register", json=REGISTER_BODY)
        response = await test_client.post("/api/auth/register", json=REGISTER_BODY)
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_validation_envelope(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json=dict(REGISTER_BODY, password="weak", password_confirmation="weak"),
            headers={"X-Request-ID": "req-1"},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["request_id"] == "req-1"
        assert any(err["field"] == "password" for err in body["details"]["errors"])

    @pytest.mark.asyncio
    async def test_refresh_and_logout(self, test_client, auth_headers):
        refreshed = await test_client.post("/api/auth/refresh", headers=auth_headers)
        assert refreshed.status_code == 200
        assert refreshed.json()["data"]["access_token"]

        logout = await test_client.post("/api/auth/logout", headers=auth_headers)
        assert logout.status_code == 200

    @pytest.mark.asyncio
    async def test_change_password(self, test_client, auth_headers):
        wrong = await test_client.post(
            "/api/auth/password",
            json={"current_password": "Nope1234", "new_password": "Better123"},
            headers=auth_headers,
        )
        assert wrong.status_code == 422

        ok = await test_client.post(
            "/api/auth/password",
            json={"current_password": "Secret123", "new_password": "Better123"},
            headers=auth_headers,
        )
        assert ok.status_code == 200

        login = await test_client.post(
            "/api/auth/login", json={"email": "ann@example.com", "password": "Better123"}
        )
        assert login.status_code == 200


class TestAuthRequired:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/users"),
            ("get", "/api/users/1"),
            ("get", "/api/posts/drafts"),
            ("post", "/api/posts"),
            ("delete", "/api/posts/1"),
            ("get", "/api/stats/users"),
            ("get", "/api/auth/me"),
        ],
    )
    async def test_missing_token(self, test_client, method, path):
        response = await getattr(test_client, method)(path)
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client):
        response = await test_client.get("/api/users", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestUsers:
    @pytest.mark.asyncio
    async def test_crud(self, test_client, auth_headers):
        created = await test_client.post(
            "/api/users",
            json={
                "name": "Bob Builder",
                "email": "bob@example.com",
                "password": "Secret123",
                "password_confirmation": "Secret123",
            },
            headers=auth_headers,
        )
        assert created.status_code == 201
        bob_id = created.json()["data"]["id"]

        listed = await test_client.get(
            "/api/users", params={"sort": "name", "order": "asc"}, headers=auth_headers
        )
        assert [u["name"] for u in listed.json()["data"]["users"]] == ["Ann Author", "Bob Builder"]
        assert listed.json()["data"]["pagination"]["total"] == 2

        updated = await test_client.put(
            f"/api/users/{bob_id}", json={"status": "inactive"}, headers=auth_headers
        )
        assert updated.json()["data"]["status"] == "inactive"

        deleted = await test_client.delete(f"/api/users/{bob_id}", headers=auth_headers)
        assert deleted.status_code == 200

        missing = await test_client.get(f"/api/users/{bob_id}", headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_user_with_posts(self, test_client, auth_headers):
        me = (await test_client.get("/api/auth/me", headers=auth_headers)).json()["data"]
        await test_client.post(
            "/api/posts",
            json={"title": "First post", "content": "Ten or more characters"},
            headers=auth_headers,
        )

        response = await test_client.get(
            f"/api/users/{me['id']}", params={"include": "posts"}, headers=auth_headers
        )
        posts = response.json()["data"]["posts"]
        assert [p["title"] for p in posts] == ["First post"]

        own = await test_client.get(f"/api/users/{me['id']}/posts", headers=auth_headers)
        assert len(own.json()["data"]) == 1


class TestPosts:
    @pytest.mark.asyncio
    async def test_create_defaults_author_to_caller(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/posts",
            json={"title": "Hello", "content": "Ten or more characters"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "draft"
        assert data["user"]["email"] == "ann@example.com"

    @pytest.mark.asyncio
    async def test_unknown_author(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/posts",
            json={"title": "Hello", "content": "Ten or more characters", "user_id": 999},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["details"]["field"] == "user_id"

    @pytest.mark.asyncio
    async def test_publish_flow(self, test_client, auth_headers):
        created = await test_client.post(
            "/api/posts",
            json={"title": "Hello", "content": "Ten or more characters"},
            headers=auth_headers,
        )
        post_id = created.json()["data"]["id"]

        drafts = await test_client.get("/api/posts/drafts", headers=auth_headers)
        assert [p["id"] for p in drafts.json()["data"]] == [post_id]

        published = await test_client.post(f"/api/posts/{post_id}/publish", headers=auth_headers)
        assert published.json()["data"]["status"] == "published"

        public = await test_client.get("/api/posts/published")
        assert [p["id"] for p in public.json()["data"]] == [post_id]

        detail = await test_client.get(f"/api/posts/{post_id}")
        assert detail.json()["data"]["user"]["name"] == "Ann Author"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, test_client, auth_headers):
        created = await test_client.post(
            "/api/posts",
            json={"title": "Hello", "content": "Ten or more characters"},
            headers=auth_headers,
        )
        post_id = created.json()["data"]["id"]

        updated = await test_client.put(
            f"/api/posts/{post_id}", json={"title": "Hello again"}, headers=auth_headers
        )
        assert updated.json()["data"]["title"] == "Hello again"

        assert (await test_client.delete(f"/api/posts/{post_id}", headers=auth_headers)).status_code == 200
        assert (await test_client.get(f"/api/posts/{post_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_list_pagination(self, test_client, auth_headers):
        for i in range(3):
            await test_client.post(
                "/api/posts",
                json={"title": f"Post {i}", "content": "Ten or more characters"},
                headers=auth_headers,
            )

        response = await test_client.get("/api/posts", params={"limit": 2, "page": 2})
        data = response.json()["data"]
        assert len(data["posts"]) == 1
        assert data["pagination"]["has_prev_page"] is True
        assert data["pagination"]["has_next_page"] is False
        assert "user" not in data["posts"][0]

    @pytest.mark.asyncio
    async def test_stats(self, test_client, auth_headers):
        await test_client.post(
            "/api/posts",
            json={"title": "Hello", "content": "Ten or more characters", "status": "published"},
            headers=auth_headers,
        )
        users = await test_client.get("/api/stats/users", headers=auth_headers)
        posts = await test_client.get("/api/stats/posts", headers=auth_headers)

        assert users.json()["data"]["total_users"] == 1
        assert posts.json()["data"]["published_posts"] == 1

    @pytest.mark.asyncio
    async def test_list_filters_by_author(self, test_client, auth_headers):
        me = (await test_client.get("/api/auth/me", headers=auth_headers)).json()["data"]
        await test_client.post(
            "/api/posts",
            json={"title": "Mine", "content": "Ten or more characters"},
            headers=auth_headers,
        )

        own = await test_client.get("/api/posts", params={"user_id": me["id"]})
        other = await test_client.get("/api/posts", params={"user_id": me["id"] + 100})

        assert [p["title"] for p in own.json()["data"]["posts"]] == ["Mine"]
        assert other.json()["data"]["posts"] == []
