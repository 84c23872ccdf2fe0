from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from landing.auth import SessionRegistry
from landing.config import settings
from landing.content.editor import ContentEditor
from landing.publish import NOTHING_MESSAGE, PUBLISHED_MESSAGE, PublishError, PublishResult
from landing.server import create_app


class FakePublisher:
    def __init__(self):
        self.calls = 0
        self.error: PublishError | None = None
        self.result = PublishResult(PUBLISHED_MESSAGE, committed=True)

    def publish(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class SilentBackend:
    async def generate_narrative(self, prompt, system):
        return "story"

    async def generate_image(self, prompt):
        return b""


@pytest.fixture
def publisher():
    return FakePublisher()


def _client(store, publisher, password="secret"):
    sessions = SessionRegistry(lambda: ContentEditor(store, publisher), password=password)
    app = create_app(store=store, publisher=publisher, backend=SilentBackend(), sessions=sessions)
    return TestClient(app)


@pytest.fixture
def client(store, publisher):
    return _client(store, publisher)


@pytest.fixture
def auth(client):
    response = client.post("/api/admin/login", json={"password": "secret"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def test_login_rejects_wrong_password(client):
    response = client.post(
        "/api/admin/login",
        json={"password": "guess"},
        headers={"Accept-Language": "en-US,en;q=0.9"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Wrong password"


def test_admin_disabled_without_password(store, publisher):
    client = _client(store, publisher, password="")
    assert client.post("/api/admin/login", json={"password": ""}).status_code == 503
    assert client.get("/api/admin/content").status_code == 503


def test_password_comes_from_settings(store, publisher, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "from-env")
    client = TestClient(create_app(store=store, publisher=publisher, backend=SilentBackend()))
    assert client.post("/api/admin/login", json={"password": "from-env"}).status_code == 200
    assert client.post("/api/admin/login", json={"password": "secret"}).status_code == 401


def test_mutations_require_session(client, make_document):
    assert client.get("/api/admin/content").status_code == 401
    response = client.post(
        "/api/admin/content",
        json={"language": "ru", "content": make_document()},
        headers={"Authorization": "Bearer nope"},
    )
    assert response.status_code == 401
    assert client.post("/api/admin/deploy").status_code == 401
    assert client.patch("/api/admin/editor/field", json={"path": "hero.title", "value": "x"}).status_code == 401


def test_x_admin_token_header_is_accepted(client):
    token = client.post("/api/admin/login", json={"password": "secret"}).json()["token"]
    assert client.get("/api/admin/content", headers={"X-Admin-Token": token}).status_code == 200


def test_logout_ends_session(client, auth):
    assert client.post("/api/admin/logout", headers=auth).json() == {"ok": True}
    assert client.get("/api/admin/content", headers=auth).status_code == 401


def test_read_content(client, auth):
    response = client.get("/api/admin/content", params={"lang": "en"}, headers=auth)
    assert response.status_code == 200
    assert response.json()["pricing"]["plans"]["start"]["price"] == "$790"

    missing = client.get("/api/admin/content", params={"lang": "xx"}, headers=auth)
    assert missing.status_code == 404
    assert missing.json()["detail"]["error"] == "not_found"


def test_write_whole_document(client, auth, store, make_document):
    document = make_document()
    document["hero"]["title"] = "Новый заголовок"
    response = client.post("/api/admin/content", json={"language": "ru", "content": document}, headers=auth)
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert store.read("ru").hero.title == "Новый заголовок"


def test_write_rejects_bad_document_and_language(client, auth, store, make_document):
    before = store.read("ru")
    document = make_document()
    document["testimonials"]["items"][0]["rating"] = 7
    response = client.post("/api/admin/content", json={"language": "ru", "content": document}, headers=auth)
    assert response.status_code == 422
    assert store.read("ru") == before

    response = client.post(
        "/api/admin/content",
        json={"language": "../../etc", "content": make_document()},
        headers=auth,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_language"


def test_deploy(client, auth, publisher):
    response = client.post("/api/admin/deploy", headers=auth)
    assert response.status_code == 200
    assert response.json()["message"] == PUBLISHED_MESSAGE
    assert response.json()["committed"] is True

    publisher.result = PublishResult(NOTHING_MESSAGE, committed=False)
    assert client.post("/api/admin/deploy", headers=auth).json()["message"] == NOTHING_MESSAGE


def test_deploy_failure_is_bad_gateway(client, auth, publisher):
    publisher.error = PublishError("push", "rejected")
    response = client.post("/api/admin/deploy", headers=auth)
    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["error"] == "publish_failed"
    assert detail["details"] == {"step": "push", "output": "rejected"}


def test_editor_flow(client, auth, store, content_root, publisher):
    en_before = (content_root / "en" / "common.json").read_bytes()

    loaded = client.post("/api/admin/editor/load", json={"language": "ru"}, headers=auth)
    assert loaded.status_code == 200
    assert loaded.json()["language"] == "ru"

    response = client.patch(
        "/api/admin/editor/field",
        json={"path": "hero.title", "value": "Новый заголовок"},
        headers=auth,
    )
    assert response.status_code == 200
    assert response.json()["dirty"] is True

    response = client.patch(
        "/api/admin/editor/list-item",
        json={"list_path": "testimonials.items", "index": 2, "field": "rating", "value": 3},
        headers=auth,
    )
    assert response.status_code == 200

    state = client.get("/api/admin/editor", headers=auth).json()
    assert state["content"]["testimonials"]["items"][2]["rating"] == 3

    assert client.post("/api/admin/editor/save", headers=auth).json()["ok"] is True
    assert store.read("ru").hero.title == "Новый заголовок"
    assert (content_root / "en" / "common.json").read_bytes() == en_before

    published = client.post("/api/admin/editor/publish", headers=auth)
    assert published.status_code == 200
    assert published.json()["message"] == PUBLISHED_MESSAGE
    assert publisher.calls == 1


def test_editor_rejects_bad_edits(client, auth):
    client.post("/api/admin/editor/load", json={"language": "ru"}, headers=auth)
    before = client.get("/api/admin/editor", headers=auth).json()["content"]

    response = client.patch(
        "/api/admin/editor/list-item",
        json={"list_path": "testimonials.items", "index": 5, "field": "rating", "value": 5},
        headers=auth,
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "index_out_of_range"

    response = client.patch(
        "/api/admin/editor/field",
        json={"path": "pricing.plans.enterprise.price", "value": "$1"},
        headers=auth,
    )
    assert response.json()["detail"]["error"] == "invalid_path"

    after = client.get("/api/admin/editor", headers=auth).json()
    assert after["content"] == before
    assert after["dirty"] is False


def test_editor_add_and_remove_items(client, auth, store):
    client.post("/api/admin/editor/load", json={"language": "en"}, headers=auth)
    added = client.post(
        "/api/admin/editor/list-item",
        json={"list_path": "pricing.plans.light.features", "item": "Priority support"},
        headers=auth,
    )
    assert added.status_code == 200
    assert added.json()["position"] == 3

    removed = client.request(
        "DELETE",
        "/api/admin/editor/list-item",
        json={"list_path": "pricing.plans.light.features", "index": 0},
        headers=auth,
    )
    assert removed.status_code == 200

    client.post("/api/admin/editor/save", headers=auth)
    features = store.read("en").pricing.plans.light.features
    assert len(features) == 3
    assert features[-1] == "Priority support"


def test_editor_load_missing_language(client, auth):
    response = client.post("/api/admin/editor/load", json={"language": "xx"}, headers=auth)
    assert response.status_code == 404
    assert response.json()["ok"] is False
    assert client.get("/api/admin/editor", headers=auth).status_code == 409


def test_editor_publish_before_save_conflicts(client, auth, publisher):
    client.post("/api/admin/editor/load", json={"language": "ru"}, headers=auth)
    response = client.post("/api/admin/editor/publish", headers=auth)
    assert response.status_code == 409
    assert publisher.calls == 0


def test_sessions_have_separate_editors(client):
    first = {"Authorization": "Bearer " + client.post("/api/admin/login", json={"password": "secret"}).json()["token"]}
    second = {"Authorization": "Bearer " + client.post("/api/admin/login", json={"password": "secret"}).json()["token"]}

    client.post("/api/admin/editor/load", json={"language": "ru"}, headers=first)
    client.post("/api/admin/editor/load", json={"language": "en"}, headers=second)

    assert client.get("/api/admin/editor", headers=first).json()["language"] == "ru"
    assert client.get("/api/admin/editor", headers=second).json()["language"] == "en"


def test_create_app_keeps_injected_dependencies(store, publisher):
    sessions = SessionRegistry(lambda: ContentEditor(store, publisher), password="secret")
    backend = SilentBackend()
    assert len(sessions) == 0

    app = create_app(store=store, publisher=publisher, backend=backend, sessions=sessions)
    assert app.state.sessions is sessions
    assert app.state.store is store
    assert app.state.publisher is publisher
    assert app.state.backend is backend

    response = TestClient(app).post("/api/admin/login", json={"password": "secret"})
    assert response.status_code == 200
    assert len(sessions) == 1
