# tests/conftest.py
import json
import os
import tempfile
import threading
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

# Settings are read at import time; point them at throwaway resources first.
_TMP = tempfile.mkdtemp(prefix="medmitra-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/portal.db"
os.environ["API_BASE_URL"] = "http://backend.test/api/v1"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["ADMIN_TOKEN"] = "ops-secret"
os.environ["DRAFT_DEBOUNCE_SECONDS"] = "60"
os.environ["OPENAI_API_KEY"] = ""

import pytest
import requests
from requests.adapters import BaseAdapter
from fastapi.testclient import TestClient

from medmitra_portal.backend.client import BackendClient
from medmitra_portal.config import settings
from medmitra_portal.database import SessionLocal, init_db
from medmitra_portal.models import EncounterDraft, Portal, PortalSession
from medmitra_portal.services import drafts, sessions

API_PREFIX = "/api/v1"


@dataclass
class Call:
    method: str
    path: str
    authorization: Optional[str]
    body: Any
    query: dict
    cookie: Optional[str]


class FakeBackend(BaseAdapter):
    """
    Transport adapter standing in for the MedMitra REST API.

    Routes map (method, path) to a list of answers; answers are (status, body)
    tuples or callables taking the PreparedRequest. The last answer of a route
    keeps being served.
    """

    def __init__(self):
        super().__init__()
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def add(self, method, path, *answers):
        self.routes.setdefault((method, path), []).extend(answers)
        return self

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]

    def send(self, request, **kwargs):
        url = urlparse(request.url)
        path = url.path[len(API_PREFIX):] if url.path.startswith(API_PREFIX) else url.path
        body = None
        if request.body:
            raw = request.body.decode() if isinstance(request.body, bytes) else request.body
            body = json.loads(raw)
        call = Call(request.method, path, request.headers.get("Authorization"), body,
                    {k: v[0] for k, v in parse_qs(url.query).items()}, request.headers.get("Cookie"))
        with self._lock:
            self.calls.append(call)
            answers = self.routes.get((request.method, path))
            if not answers:
                answer = (404, {"success": False, "message": f"No route {request.method} {path}"})
            else:
                answer = answers.pop(0) if len(answers) > 1 else answers[0]
        if callable(answer):
            answer = answer(request)
        status, payload = answer[0], answer[1]
        headers = answer[2] if len(answer) > 2 else {}
        return _response(request, status, payload, headers)

    def close(self):
        pass


def _response(request, status, payload, headers):
    resp = requests.Response()
    resp.status_code = status
    resp.url = request.url
    resp.request = request
    resp.reason = "OK" if status < 400 else "Error"
    if isinstance(payload, bytes):
        resp._content = payload
        resp.headers["Content-Type"] = "application/pdf"
    elif payload is None:
        resp._content = b""
    else:
        resp._content = json.dumps(payload).encode()
        resp.headers["Content-Type"] = "application/json"
    resp.headers.update(headers)
    resp.encoding = "utf-8"
    return resp


@pytest.fixture(scope="session", autouse=True)
def _database():
    init_db()
    yield


@pytest.fixture(autouse=True)
def _clean_state():
    yield
    drafts._PENDING.clear()
    db = SessionLocal()
    try:
        db.query(EncounterDraft).delete()
        db.query(PortalSession).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http(backend):
    s = requests.Session()
    s.mount("http://backend.test", backend)
    return s


@pytest.fixture
def make_session():
    def _make(portal=Portal.doctor, access="access-1", refresh="refresh-1", user=None):
        return sessions.create_session(portal, access, refresh, user or {"email": f"{portal.value}@example.com"})
    return _make


@pytest.fixture
def client_for(http):
    def _client(tokens=None):
        return BackendClient(tokens, http=http)
    return _client


@pytest.fixture
def app_client(http):
    from medmitra_portal.main import app
    from medmitra_portal.routers.deps import get_http

    app.dependency_overrides[get_http] = lambda: http
    tc = TestClient(app)
    yield tc
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(app_client, make_session):
    """Put a portal session cookie on the test client."""
    def _sign_in(portal=Portal.doctor, **kw):
        tokens = make_session(portal, **kw)
        app_client.cookies.set(settings.SESSION_COOKIE_NAME, tokens.session_id)
        return tokens
    return _sign_in
