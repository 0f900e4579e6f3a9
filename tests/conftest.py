"""
Fakes for Supabase, PayPal and Resend plus a configured TestClient.

FakeSupabase keeps tables as lists of dicts and understands the small query
surface the application uses: select/eq/limit, insert, update, rpc, auth and
storage.
"""

import copy
import itertools
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from mystar.config import Settings, get_settings
from mystar.mailer import EmailDeliveryError, get_mailer
from mystar.main import create_app
from mystar.paypal import PayPalClient, get_paypal
from mystar.supabase_client import get_supabase

FAN_TOKEN = "fan-token"
CREATOR_TOKEN = "creator-token"
ADMIN_TOKEN = "admin-token"


def auth_header(token=FAN_TOKEN):
    return {"Authorization": f"Bearer {token}"}


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.max_rows = None

    def select(self, columns="*"):
        self.action = "select"
        return self

    def insert(self, row):
        self.action = "insert"
        self.payload = row
        return self

    def update(self, values):
        self.action = "update"
        self.payload = values
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def _matches(self, row):
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def execute(self):
        failure = self.db.failures.get((self.action, self.table))
        if failure:
            raise APIError({"message": failure, "code": "XX000"})

        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "insert":
            row = copy.deepcopy(self.payload)
            row.setdefault("id", f"{self.table}-{next(self.db.ids)}")
            rows.append(row)
            return SimpleNamespace(data=[copy.deepcopy(row)])

        matched = [row for row in rows if self._matches(row)]
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
        if self.max_rows is not None:
            matched = matched[:self.max_rows]
        return SimpleNamespace(data=copy.deepcopy(matched))


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        if self.name in self.db.rpc_errors:
            raise APIError({"message": self.db.rpc_errors[self.name], "code": "P0001"})
        return SimpleNamespace(data=self.db.rpc_results.get(self.name))


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.signups = []
        self.sign_up_error = None
        self.resent = []
        self.resets = []

    def get_user(self, token):
        if token not in self.users:
            raise Exception("invalid JWT")
        return SimpleNamespace(user=self.users[token])

    def sign_up(self, credentials):
        if self.sign_up_error:
            raise Exception(self.sign_up_error)
        self.signups.append(credentials)
        user = SimpleNamespace(id=f"user-{len(self.signups)}", email=credentials["email"], user_metadata={})
        return SimpleNamespace(user=user, session=None)

    def resend(self, credentials):
        self.resent.append(credentials)

    def reset_password_for_email(self, email, options=None):
        self.resets.append((email, options))


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, content, file_options=None):
        self.storage.uploads.append((self.name, path, content, file_options))

    def get_public_url(self, path):
        return f"https://cdn.example.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.buckets = []
        self.uploads = []

    def list_buckets(self):
        return [SimpleNamespace(name=name) for name in self.buckets]

    def create_bucket(self, name, options=None):
        self.buckets.append(name)

    def from_(self, name):
        return FakeBucket(self, name)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.rpc_calls = []
        self.rpc_results = {}
        self.rpc_errors = {}
        self.ids = itertools.count(1)
        self.auth = FakeAuth()
        self.storage = FakeStorage()

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    def rows(self, name):
        return self.tables.get(name, [])

    def fail(self, action, table, message="database error"):
        self.failures[(action, table)] = message


class FakeMailer:
    def __init__(self, api_key="re_test_key"):
        self.api_key = api_key
        self.sent = []
        self.error = None

    @property
    def is_configured(self):
        return bool(self.api_key)

    def send(self, sender, to, subject, html, reply_to=None):
        if self.error:
            raise EmailDeliveryError(self.error, 422)
        self.sent.append({"from": sender, "to": to, "subject": subject, "html": html, "reply_to": reply_to})
        return f"email-{len(self.sent)}"


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self.payload = payload
        self.text = ""
        self.reason = "Error"

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self.payload


class FakePayPalSession:
    """Answers PayPal endpoints by URL suffix; override entries to simulate failures"""

    def __init__(self):
        self.requests = []
        self.responses = {
            "/v1/oauth2/token": FakeResponse(200, {"access_token": "A21-token", "expires_in": 32400}),
            "/v2/checkout/orders": FakeResponse(201, {"id": "ORDER-1", "status": "CREATED"}),
            "/capture": FakeResponse(201, {
                "id": "ORDER-1",
                "status": "COMPLETED",
                "purchase_units": [{"payments": {"captures": [{"id": "CAPTURE-1", "status": "COMPLETED"}]}}],
            }),
        }

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        for suffix, response in self.responses.items():
            if url.endswith(suffix):
                return response
        raise AssertionError(f"unexpected PayPal call {url}")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SUPABASE_URL="https://abcdefgh.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="service-role",
        PAYPAL_CLIENT_ID="client-id",
        PAYPAL_CLIENT_SECRET="client-secret",
        PAYPAL_SANDBOX=True,
        RESEND_API_KEY="re_test_key",
        ENVIRONMENT="production",
        DATA_DIR=str(tmp_path / "data"),
        _env_file=None,
    )


@pytest.fixture
def supabase():
    db = FakeSupabase()
    db.auth.users[FAN_TOKEN] = SimpleNamespace(id="fan-1", email="dana@example.com", user_metadata={"name": "Dana"})
    db.auth.users[CREATOR_TOKEN] = SimpleNamespace(id="creator-1", email="noa@example.com", user_metadata={})
    db.auth.users[ADMIN_TOKEN] = SimpleNamespace(id="admin-1", email="admin@example.com", user_metadata={})
    db.tables["users"] = [
        {"id": "fan-1", "email": "dana@example.com", "role": "fan"},
        {"id": "creator-1", "email": "noa@example.com", "role": "creator"},
        {"id": "admin-1", "email": "admin@example.com", "role": "admin"},
    ]
    return db


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def paypal_session():
    return FakePayPalSession()


@pytest.fixture
def paypal(settings, paypal_session):
    return PayPalClient(
        settings.PAYPAL_CLIENT_ID,
        settings.PAYPAL_CLIENT_SECRET,
        settings.paypal_api_url,
        session=paypal_session,
    )


@pytest.fixture
def app(settings, supabase, mailer, paypal):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_supabase] = lambda: supabase
    application.dependency_overrides[get_mailer] = lambda: mailer
    application.dependency_overrides[get_paypal] = lambda: paypal
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
