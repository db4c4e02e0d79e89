"""
End-to-end tests of the HTTP API with FastAPI's TestClient.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import update

from conftest import FailingLedger, StubScorer
from soulscribe.api.deps import get_scorer
from soulscribe.core.settings import settings
from soulscribe.db.session import get_session_factory
from soulscribe.main import app
from soulscribe.models import User
from soulscribe.services.auth import create_access_token
from soulscribe.services.ledger import get_ledger


@pytest.fixture
def client(session_factory, ledger):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_scorer] = lambda: StubScorer()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def login(client, wallet="alice.near"):
    resp = client.post("/auth/login", json={"near_wallet": wallet, "near_address": f"ed25519:{wallet}"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    return body["user"], {"Authorization": f"Bearer {body['access_token']}"}


def make_admin(session_factory, user_id):
    async def _promote():
        async with session_factory() as db:
            await db.execute(update(User).where(User.id == user_id).values(is_admin=True))
            await db.commit()

    asyncio.run(_promote())


def submit(client, headers, categories=("tutorial",), text="How to stake NEAR, step by step."):
    resp = client.post("/content", json={"text": text, "categories": list(categories)}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def admin_headers(client, session_factory):
    user, headers = login(client, "root.near")
    make_admin(session_factory, user["id"])
    return headers


# ── Basics ───────────────────────────────────────────────────────────


def test_health_sets_security_headers(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["Content-Security-Policy"].startswith("default-src 'none'")
    assert resp.headers["Cache-Control"] == "no-store"
    assert "Server-Timing" in resp.headers


def test_cors_preflight_does_not_allow_credentials(client):
    resp = client.options(
        "/content",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert "access-control-allow-credentials" not in resp.headers


def test_categories(client):
    assert client.get("/content/categories").json() == ["tutorial", "review", "news", "analysis", "promo", "other"]


# ── Auth ─────────────────────────────────────────────────────────────


def test_login_creates_user_once(client):
    user, headers = login(client)
    again, _ = login(client)
    assert user["id"] == again["id"]
    assert user["username"] == "alice"
    assert user["is_admin"] is False

    me = client.get("/users/me", headers=headers).json()
    assert me["near_wallet"] == "alice.near"
    assert client.get("/auth/status", headers=headers).json() == {"authenticated": True, "near_wallet": "alice.near"}


def test_protected_routes_need_a_token(client):
    assert client.get("/users/me").status_code == 401
    assert client.get("/users/me", headers={"Authorization": "Bearer nonsense"}).status_code == 401


def test_token_bound_to_another_wallet_is_refused(client):
    user, _ = login(client, "alice.near")
    forged = create_access_token(user["id"], "mallory.near")
    assert client.get("/users/me", headers={"Authorization": f"Bearer {forged}"}).status_code == 401


def test_token_without_wallet_claim_is_refused(client):
    user, _ = login(client, "alice.near")
    legacy = jwt.encode({"iss": settings.jwt_issuer, "sub": str(user["id"]), "exp": 4102444800}, settings.jwt_secret, algorithm="HS256")
    assert client.get("/users/me", headers={"Authorization": f"Bearer {legacy}"}).status_code == 401


# ── Submission ───────────────────────────────────────────────────────


def test_submit_returns_scored_pending_content(client):
    _, headers = login(client)
    body = submit(client, headers)
    assert body["status"] == "pending"
    assert body["ai_analysis"]["approved"] is True
    assert body["token_issued"] is False

    mine = client.get("/content/user", headers=headers).json()
    assert [c["id"] for c in mine] == [body["id"]]
    assert client.get(f"/content/{body['id']}").json()["text"] == body["text"]


@pytest.mark.parametrize("payload", [
    {"text": "Hello", "categories": []},
    {"text": "Hello", "categories": ["gossip"]},
    {"text": "", "categories": ["news"]},
    {"text": "   ", "categories": ["news"]},
    {"text": "Hello", "categories": ["news"], "link": "javascript:alert(1)"},
])
def test_invalid_submissions_are_rejected(client, payload):
    _, headers = login(client)
    resp = client.post("/content", json=payload, headers=headers)
    assert resp.status_code == 422
    assert client.get("/content/user", headers=headers).json() == []


def test_unknown_content_is_404(client):
    assert client.get("/content/999").status_code == 404


# ── Moderation ───────────────────────────────────────────────────────


def test_admin_routes_require_admin(client):
    _, headers = login(client)
    content = submit(client, headers)
    assert client.post(f"/admin/content/{content['id']}/approve", headers=headers).status_code == 403
    assert client.get("/admin/content", headers=headers).status_code == 403


def test_approval_flow(client, admin_headers, ledger):
    user, headers = login(client)
    content = submit(client, headers, categories=("news", "analysis"))
    other = submit(client, headers, categories=("promo",), text="Buy my thing.")

    listing = client.get("/admin/content", headers=admin_headers).json()
    assert [(c["id"], c["near_wallet"]) for c in listing] == [(content["id"], "alice.near"), (other["id"], "alice.near")]
    assert client.get("/content/feed").json() == []

    resp = client.post(f"/admin/content/{content['id']}/approve", json={"reviewer": "root"}, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    approved = resp.json()
    assert approved["status"] == "approved"
    assert approved["token_issued"] is True

    again = client.post(f"/admin/content/{content['id']}/approve", headers=admin_headers).json()
    assert again["token_id"] == approved["token_id"]
    assert ledger.mint_calls == 1

    rejected = client.post(f"/admin/content/{other['id']}/reject", headers=admin_headers).json()
    assert rejected["status"] == "rejected"

    tokens = client.get("/tokens/user", headers=headers).json()
    assert len(tokens) == 1
    assert tokens[0]["token_type"] == "Analysis Expert"
    assert tokens[0]["metadata"]["reviewer"] == "root"
    assert client.get(f"/tokens/{tokens[0]['id']}").json()["token_id"] == approved["token_id"]
    assert client.get("/tokens/999").status_code == 404

    on_ledger = client.get("/tokens/ledger", headers=headers).json()
    assert [t["token_id"] for t in on_ledger] == [approved["token_id"]]

    feed = client.get("/content/feed").json()
    assert [c["id"] for c in feed] == [content["id"]]

    board = client.get("/leaderboard").json()
    assert board == [{"user_id": user["id"], "username": "alice", "near_wallet": "alice.near", "token_count": 1}]

    overview = client.get("/admin/overview", headers=admin_headers).json()
    assert overview["moderation"] == {"pending_count": 0, "approved_count": 1, "rejected_count": 1}
    assert overview["tokens_issued"] == 1
    assert overview["metrics"] is None


def test_conflicting_decisions(client, admin_headers):
    _, headers = login(client)
    content = submit(client, headers)
    client.post(f"/admin/content/{content['id']}/reject", headers=admin_headers)
    resp = client.post(f"/admin/content/{content['id']}/approve", headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["retryable"] is False


def test_missing_content_decisions_are_404(client, admin_headers):
    assert client.post("/admin/content/999/approve", headers=admin_headers).status_code == 404
    assert client.post("/admin/content/999/reject", headers=admin_headers).status_code == 404


def test_ledger_outage_is_retryable(client, admin_headers):
    _, headers = login(client)
    content = submit(client, headers)
    app.dependency_overrides[get_ledger] = lambda: FailingLedger()

    resp = client.post(f"/admin/content/{content['id']}/approve", headers=admin_headers)

    assert resp.status_code == 503
    assert resp.json() == {"detail": "ledger unreachable", "retryable": True}
    assert client.get(f"/content/{content['id']}").json()["status"] == "pending"


def test_leaderboard_limit_is_validated(client):
    assert client.get("/leaderboard?limit=0").status_code == 422
    assert client.get("/leaderboard?limit=5").json() == []
