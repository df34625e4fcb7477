"""API-level tests using FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from headless_cms.api import app
from headless_cms.db.base import get_db
from headless_cms.policy.roles import RoleService, UserService
from headless_cms.schemas.roles import PermissionCreate, RoleCreate, RoleUpdate, UserCreate


@pytest.fixture
def client(session_factory, seeded):
    """Client whose requests share the test engine."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def as_user(user):
    return {"X-User-Id": user.id}


class TestHealth:
    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestIdentity:
    def test_missing_header(self, client):
        assert client.get("/content/types").status_code == 401

    def test_unknown_user(self, client):
        response = client.get("/content/types", headers={"X-User-Id": "nobody"})
        assert response.status_code == 401


class TestContentApi:
    def test_create_content_type(self, client, users):
        response = client.post(
            "/content/types",
            headers=as_user(users["admin"]),
            json={
                "name": "Page",
                "slug": "page",
                "fields": [{"name": "title", "type": "string", "required": True}],
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        assert body["content_type"]["fields"][0]["name"] == "title"

    def test_viewer_cannot_create_content_type(self, client, users):
        response = client.post(
            "/content/types",
            headers=as_user(users["viewer"]),
            json={"name": "Page", "slug": "page"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "NO_PERMISSION"

    def test_entry_lifecycle(self, client, users, article_type):
        editor = as_user(users["editor"])
        created = client.post(
            f"/content/{article_type.id}/entries",
            headers=editor,
            json={"data": {"title": "Hello", "slug": "hello"}},
        )
        assert created.status_code == 201
        entry = created.json()["entry"]
        assert entry["status"] == "draft"

        updated = client.put(
            f"/content/entries/{entry['id']}",
            headers=as_user(users["seo_specialist"]),
            json={"data": {"title": "x", "meta_title": "SEO"}},
        )
        assert updated.status_code == 200
        assert updated.json()["entry"]["data"]["title"] == "Hello"
        assert updated.json()["entry"]["data"]["meta_title"] == "SEO"

        fetched = client.get(f"/content/entries/{entry['id']}", headers=editor)
        assert fetched.json()["data"]["meta_title"] == "SEO"

        listed = client.get(f"/content/{article_type.id}/entries", headers=editor)
        assert listed.json()["count"] == 1

        preview = client.get(f"/content/entries/{entry['id']}/seo-preview", headers=editor)
        assert preview.json()["seo"] == {"slug": "hello", "meta_title": "SEO"}

    def test_validation_error_shape(self, client, users, article_type):
        response = client.post(
            f"/content/{article_type.id}/entries",
            headers=as_user(users["editor"]),
            json={"data": {"title": "Hi"}},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "CONSTRAINT_VIOLATION"
        assert body["details"]["field"] == "title"

    def test_missing_entry(self, client, users):
        response = client.get("/content/entries/missing", headers=as_user(users["viewer"]))
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_non_finite_number_rejected(self, client, users, article_type):
        response = client.post(
            f"/content/{article_type.id}/entries",
            headers={**as_user(users["editor"]), "Content-Type": "application/json"},
            content='{"data": {"title": "Hello", "rating": NaN}}',
        )
        assert response.status_code == 422
        assert response.json()["details"]["constraint"] == "finite"


class TestReadScopeOnWrites:
    """Entries echoed by write and workflow endpoints honour the read scope."""

    @pytest.fixture
    def title_reader(self, seeded):
        RoleService(seeded).create(
            RoleCreate(
                name="title_reader",
                permissions=[
                    PermissionCreate(module="ContentEntry", action="create", field_scope="all"),
                    PermissionCreate(module="ContentEntry", action="update", field_scope="all"),
                    PermissionCreate(
                        module="ContentEntry",
                        action="read",
                        field_scope="custom",
                        allowed_fields=["title"],
                    ),
                ],
            )
        )
        return UserService(seeded).create(UserCreate(email="t@example.com", role="title_reader"))

    def test_create_and_update_responses_are_filtered(self, client, title_reader, article_type):
        headers = as_user(title_reader)
        created = client.post(
            f"/content/{article_type.id}/entries",
            headers=headers,
            json={"data": {"title": "Hello", "body": "Secret"}},
        )
        assert created.status_code == 201
        assert created.json()["entry"]["data"] == {"title": "Hello"}

        entry_id = created.json()["entry"]["id"]
        updated = client.put(
            f"/content/entries/{entry_id}",
            headers=headers,
            json={"data": {"body": "Still secret", "meta_title": "SEO"}},
        )
        assert updated.status_code == 200
        assert updated.json()["entry"]["data"] == {"title": "Hello"}

    def test_transition_response_is_filtered(self, client, seeded, users, article_type):
        editor = as_user(users["editor"])
        created = client.post(
            f"/content/{article_type.id}/entries",
            headers=editor,
            json={"data": {"title": "Hello", "body": "Secret"}},
        )
        entry_id = created.json()["entry"]["id"]

        roles = RoleService(seeded)
        roles.update(
            roles.get_by_name("editor").id,
            RoleUpdate(
                permissions=[
                    PermissionCreate(module="ContentEntry", action="update", field_scope="all"),
                    PermissionCreate(
                        module="ContentEntry",
                        action="read",
                        field_scope="custom",
                        allowed_fields=["title"],
                    ),
                ]
            ),
        )

        response = client.post(f"/workflow/entries/{entry_id}/request-review", headers=editor)
        assert response.status_code == 200
        assert response.json()["entry"]["status"] == "in_review"
        assert response.json()["entry"]["data"] == {"title": "Hello"}


class TestWorkflowApi:
    def test_transition_rules_enforced(self, client, users, article_type):
        created = client.post(
            f"/content/{article_type.id}/entries",
            headers=as_user(users["editor"]),
            json={"data": {"title": "Hello"}},
        )
        entry_id = created.json()["entry"]["id"]

        rejected = client.post(
            f"/workflow/entries/{entry_id}/status",
            headers=as_user(users["manager"]),
            json={"status": "approved"},
        )
        assert rejected.status_code == 409
        assert rejected.json()["error"] == "INVALID_TRANSITION"

        review = client.post(
            f"/workflow/entries/{entry_id}/request-review",
            headers=as_user(users["editor"]),
            json={"comment": "ready"},
        )
        assert review.status_code == 200
        assert review.json()["entry"]["status"] == "in_review"

        history = client.get(
            f"/workflow/entries/{entry_id}/history", headers=as_user(users["viewer"])
        )
        assert history.status_code == 200

        stats = client.get(
            f"/workflow/content-types/{article_type.id}/stats", headers=as_user(users["viewer"])
        )
        assert stats.json()["stats"]["in_review"] == 1
        assert stats.json()["stats"]["total"] == 1

    def test_unknown_status_value(self, client, users, article_type):
        created = client.post(
            f"/content/{article_type.id}/entries",
            headers=as_user(users["editor"]),
            json={"data": {"title": "Hello"}},
        )
        response = client.post(
            f"/workflow/entries/{created.json()['entry']['id']}/status",
            headers=as_user(users["editor"]),
            json={"status": "archived"},
        )
        assert response.status_code == 422


class TestRolesApi:
    def test_role_admin_requires_full_access(self, client, users):
        response = client.post(
            "/roles", headers=as_user(users["editor"]), json={"name": "reviewer"}
        )
        assert response.status_code == 403

    def test_admin_creates_role_and_user(self, client, users):
        admin = as_user(users["admin"])
        role = client.post(
            "/roles",
            headers=admin,
            json={
                "name": "reviewer",
                "permissions": [{"module": "ContentEntry", "action": "read"}],
            },
        )
        assert role.status_code == 201

        user = client.post(
            "/users", headers=admin, json={"email": "r@example.com", "role": "reviewer"}
        )
        assert user.status_code == 201
        assert user.json()["user"]["role"] == "reviewer"

    def test_list_roles(self, client, users):
        response = client.get("/roles", headers=as_user(users["viewer"]))
        assert response.json()["count"] == 6
