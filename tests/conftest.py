"""
Shared fixtures: an in-memory stand-in for the Supabase client surface the
services use (PostgREST query builder, auth + auth.admin, storage), wired into
the app through dependency overrides.
"""

import copy
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from portal.main import app
from portal.database.supabase_client import get_supabase, get_service_supabase
from portal.database.storage import LogoStorage
from portal.modules.auth.service import clear_auth_cache

# Columns that carry a unique constraint in the real schema
UNIQUE_COLUMNS = {
    "companies": [("name",)],
    "workspaces": [("name",)],
    "workspace_users": [("workspace_id", "user_id")],
    "user_favorites": [("user_id", "dashboard_id")],
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeQuery:
    def __init__(self, db, table_name):
        self.db = db
        self.table_name = table_name
        self.operation = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.limit_count = None
        self.single_mode = None
        self.count_mode = None

    def select(self, *columns, count=None):
        self.count_mode = count
        return self

    def insert(self, data):
        self.operation, self.payload = "insert", data
        return self

    def upsert(self, data):
        self.operation, self.payload = "upsert", data
        return self

    def update(self, data):
        self.operation, self.payload = "update", data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe_single"
        return self

    def _matches(self, row):
        return all(check(row) for check in self.filters)

    def _check_unique(self, rows, candidate, ignore=None):
        for columns in UNIQUE_COLUMNS.get(self.table_name, []):
            for row in rows:
                if row is ignore:
                    continue
                if all(row.get(c) == candidate.get(c) for c in columns):
                    raise APIError({
                        "code": "23505",
                        "message": f"duplicate key value violates unique constraint on {self.table_name}",
                        "details": None,
                        "hint": None,
                    })

    def execute(self):
        if (self.table_name, self.operation) in self.db.failures or (self.table_name, "*") in self.db.failures:
            raise APIError({"code": "XX000", "message": f"{self.operation} on {self.table_name} failed",
                            "details": None, "hint": None})
        self.db.calls.append((self.table_name, self.operation))
        rows = self.db.tables.setdefault(self.table_name, [])
        handler = getattr(self, f"_execute_{self.operation}")
        return handler(rows)

    def _execute_select(self, rows):
        matched = [row for row in rows if self._matches(row)]
        if self.order_by:
            column, desc = self.order_by
            matched.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        count = len(matched)
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        data = copy.deepcopy(matched)

        if self.single_mode == "single":
            if len(data) != 1:
                raise APIError({"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned",
                                "details": None, "hint": None})
            return SimpleNamespace(data=data[0], count=None)
        if self.single_mode == "maybe_single":
            if not data:
                return None
            return SimpleNamespace(data=data[0], count=None)
        return SimpleNamespace(data=data, count=count if self.count_mode else None)

    def _execute_insert(self, rows):
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = []
        for item in items:
            row = copy.deepcopy(item)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", _now())
            self._check_unique(rows + inserted, row)
            inserted.append(row)
        rows.extend(inserted)
        return SimpleNamespace(data=copy.deepcopy(inserted), count=None)

    def _execute_upsert(self, rows):
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        result = []
        for item in items:
            existing = next((r for r in rows if item.get("id") and r.get("id") == item["id"]), None)
            if existing is not None:
                existing.update(copy.deepcopy(item))
                result.append(existing)
            else:
                row = copy.deepcopy(item)
                row.setdefault("id", str(uuid.uuid4()))
                row.setdefault("created_at", _now())
                rows.append(row)
                result.append(row)
        return SimpleNamespace(data=copy.deepcopy(result), count=None)

    def _execute_update(self, rows):
        updated = []
        for row in rows:
            if self._matches(row):
                candidate = {**row, **self.payload}
                self._check_unique(rows, candidate, ignore=row)
                row.update(copy.deepcopy(self.payload))
                updated.append(row)
        return SimpleNamespace(data=copy.deepcopy(updated), count=None)

    def _execute_delete(self, rows):
        removed = [row for row in rows if self._matches(row)]
        self.db.tables[self.table_name] = [row for row in rows if not self._matches(row)]
        return SimpleNamespace(data=copy.deepcopy(removed), count=None)


class FakeAdminAuth:
    def __init__(self, auth):
        self.auth = auth

    def list_users(self):
        return list(self.auth.users.values())

    def create_user(self, attributes):
        email = attributes["email"]
        if any(u.email == email for u in self.auth.users.values()):
            raise Exception("A user with this email address has already been registered")
        user = self.auth.new_user(email, attributes.get("password"), attributes.get("user_metadata"))
        return SimpleNamespace(user=user)

    def update_user_by_id(self, user_id, attributes):
        user = self.auth.users.get(user_id)
        if user is None:
            raise Exception("User not found")
        if "password" in attributes:
            user.password = attributes["password"]
        if "app_metadata" in attributes:
            user.app_metadata = {**user.app_metadata, **attributes["app_metadata"]}
        return SimpleNamespace(user=user)

    def delete_user(self, user_id):
        if user_id not in self.auth.users:
            raise Exception("User not found")
        del self.auth.users[user_id]


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.tokens = {}
        self.reset_requests = []
        self.signed_out = 0
        self.admin = FakeAdminAuth(self)

    def new_user(self, email, password=None, user_metadata=None):
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=email,
            password=password,
            user_metadata=user_metadata or {},
            app_metadata={},
            created_at=_now(),
            last_sign_in_at=None,
        )
        self.users[user.id] = user
        return user

    def issue_token(self, user):
        token = f"token-{user.id}"
        self.tokens[token] = user.id
        return token

    def _session(self, user):
        return SimpleNamespace(access_token=self.issue_token(user), refresh_token=f"refresh-{user.id}")

    def get_user(self, jwt=None):
        user_id = self.tokens.get(jwt)
        if user_id is None or user_id not in self.users:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.users[user_id])

    def sign_in_with_password(self, credentials):
        for user in self.users.values():
            if user.email == credentials["email"] and user.password == credentials["password"]:
                user.last_sign_in_at = _now()
                return SimpleNamespace(user=user, session=self._session(user))
        raise Exception("Invalid login credentials")

    def sign_up(self, credentials):
        if any(u.email == credentials["email"] for u in self.users.values()):
            raise Exception("User already registered")
        metadata = credentials.get("options", {}).get("data")
        user = self.new_user(credentials["email"], credentials["password"], metadata)
        return SimpleNamespace(user=user, session=None)

    def refresh_session(self, refresh_token):
        user_id = refresh_token.replace("refresh-", "", 1)
        if user_id not in self.users:
            raise Exception("Invalid Refresh Token")
        user = self.users[user_id]
        return SimpleNamespace(user=user, session=self._session(user))

    def sign_out(self):
        self.signed_out += 1

    def reset_password_for_email(self, email, options=None):
        self.reset_requests.append((email, options))


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, content, file_options=None):
        if self.storage.fail_uploads:
            raise Exception("upload failed")
        self.storage.files[(self.name, path)] = content
        return SimpleNamespace(path=path)

    def remove(self, paths):
        for path in paths:
            self.storage.files.pop((self.name, path), None)
        return []

    def get_public_url(self, path):
        return f"https://storage.example.com/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.buckets = []
        self.files = {}
        self.fail_uploads = False

    def list_buckets(self):
        return list(self.buckets)

    def create_bucket(self, name, options=None):
        self.buckets.append(SimpleNamespace(name=name, options=options))

    def from_(self, name):
        return FakeBucket(self, name)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failures = set()
        self.calls = []
        self.auth = FakeAuth()
        self.storage = FakeStorage()

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        return self.tables.get(name, [])

    def seed(self, _table, **row):
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", _now())
        self.tables.setdefault(_table, []).append(row)
        return row

    def fail(self, table_name, operation="*"):
        self.failures.add((table_name, operation))

    def add_user(self, email, password="secret123", role="user", company_id=None, is_active=True, name=None):
        """Auth user plus profile; returns (user, bearer headers)"""
        user = self.auth.new_user(email, password)
        self.seed(
            "profiles",
            id=user.id,
            email=email,
            name=name or email.split("@")[0],
            role=role,
            company_id=company_id,
            is_active=is_active,
        )
        return user, {"Authorization": f"Bearer {self.auth.issue_token(user)}"}


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    clear_auth_cache()
    LogoStorage.reset()
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_service_supabase] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def admin(fake_db):
    return fake_db.add_user("admin@example.com", role="admin")


@pytest.fixture
def admin_headers(admin):
    return admin[1]


@pytest.fixture
def member(fake_db):
    return fake_db.add_user("member@example.com")


@pytest.fixture
def member_headers(member):
    return member[1]
