"""
In-memory stand-ins for the Supabase client, identity provider and clock.

FakeSupabase implements the slice of the postgrest query builder the
repositories use (select/insert/update/upsert/delete with eq, in_, gte, or_,
order, range, limit), unique constraints that raise the same APIError
code PostgreSQL does, the two capacity-bounded counter RPCs, auth and storage.
"""

import threading
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from uuid import uuid4

from postgrest.exceptions import APIError
from supabase import AuthApiError

from core.domain.models import AuthUser
from core.interfaces.gateways import IIdentityProvider

UNIQUE_KEYS = {
    "profiles": [("id",)],
    "fighter_profiles": [("user_id",), ("handle",)],
    "tournament_participants": [("tournament_id", "fighter_id")],
    "training_camp_participants": [("camp_id", "fighter_id")],
    "system_settings": [("id",)],
}

COUNTER_RPCS = {
    "increment_tournament_participants": ("tournaments", "tournament_id"),
    "increment_camp_participants": ("training_camps", "camp_id"),
}


def _same(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return a is b
    return str(a) == str(b)


def _sort_value(value: Any):
    return (1, "") if value is None else (0, value)


class FakeAuthApiError(AuthApiError):
    """AuthApiError without the version-dependent constructor"""

    def __init__(self, message: str, status: int = 400, code: Optional[str] = None):
        Exception.__init__(self, message)
        self.message = message
        self.status = status
        self.code = code
        self.name = "AuthApiError"


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self._op = "select"
        self._payload: Any = None
        self._count: Optional[str] = None
        self._filters: List = []
        self._orders: List = []
        self._limit: Optional[int] = None
        self._range: Optional[tuple] = None

    # === Operations ===

    def select(self, *columns, count: Optional[str] = None):
        self._op = "select"
        self._count = count
        return self

    def insert(self, data):
        self._op, self._payload = "insert", data
        return self

    def update(self, data):
        self._op, self._payload = "update", data
        return self

    def upsert(self, data):
        self._op, self._payload = "upsert", data
        return self

    def delete(self):
        self._op = "delete"
        return self

    # === Filters ===

    def eq(self, column: str, value):
        self._filters.append(lambda row: _same(row.get(column), value))
        return self

    def in_(self, column: str, values):
        allowed = {str(v) for v in values}
        self._filters.append(lambda row: str(row.get(column)) in allowed)
        return self

    def gte(self, column: str, value):
        self._filters.append(lambda row: row.get(column) is not None and str(row[column]) >= str(value))
        return self

    def or_(self, expression: str):
        """Only the ``col.ilike.%term%`` form"""
        clauses = []
        for clause in expression.split(","):
            column, _, pattern = clause.split(".", 2)
            clauses.append((column, pattern.strip("%").lower()))
        self._filters.append(
            lambda row: any(term in str(row.get(column) or "").lower() for column, term in clauses)
        )
        return self

    def order(self, column: str, desc: bool = False):
        self._orders.append((column, desc))
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def range(self, start: int, end: int):
        self._range = (start, end)
        return self

    # === Execution ===

    def _matches(self, row: dict) -> bool:
        return all(f(row) for f in self._filters)

    def execute(self):
        with self.db.lock:
            self.db.calls.append((self.table_name, self._op))
            if self.db.fail_with is not None:
                raise self.db.fail_with
            return getattr(self, f"_execute_{self._op}")()

    def _execute_select(self):
        rows = [dict(r) for r in self.db.rows(self.table_name) if self._matches(r)]
        total = len(rows)
        for column, desc in reversed(self._orders):
            rows.sort(key=lambda r: _sort_value(r.get(column)), reverse=desc)
        if self._range is not None:
            rows = rows[self._range[0]:self._range[1] + 1]
        if self._limit is not None:
            rows = rows[:self._limit]
        return SimpleNamespace(data=rows, count=total if self._count else None)

    def _execute_insert(self):
        payload = self._payload if isinstance(self._payload, list) else [self._payload]
        inserted = [self.db.insert_row(self.table_name, dict(p)) for p in payload]
        return SimpleNamespace(data=[dict(r) for r in inserted], count=None)

    def _execute_update(self):
        updated = []
        for row in self.db.rows(self.table_name):
            if self._matches(row):
                row.update(self._payload)
                updated.append(dict(row))
        return SimpleNamespace(data=updated, count=None)

    def _execute_delete(self):
        rows = self.db.rows(self.table_name)
        deleted = [dict(r) for r in rows if self._matches(r)]
        rows[:] = [r for r in rows if not self._matches(r)]
        return SimpleNamespace(data=deleted, count=None)

    def _execute_upsert(self):
        payload = dict(self._payload)
        for row in self.db.rows(self.table_name):
            if "id" in payload and _same(row.get("id"), payload["id"]):
                row.update(payload)
                return SimpleNamespace(data=[dict(row)], count=None)
        return SimpleNamespace(data=[dict(self.db.insert_row(self.table_name, payload))], count=None)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        with self.db.lock:
            self.db.rpc_calls.append((self.name, self.params))
            if self.db.fail_with is not None:
                raise self.db.fail_with
            table, param = COUNTER_RPCS[self.name]
            for row in self.db.rows(table):
                if _same(row["id"], self.params[param]):
                    current = row.get("current_participants") or 0
                    if current >= row["max_participants"]:
                        return SimpleNamespace(data=False, count=None)
                    row["current_participants"] = current + 1
                    return SimpleNamespace(data=True, count=None)
            return SimpleNamespace(data=False, count=None)


class FakeAdminAuth:
    def __init__(self, auth: "FakeAuth"):
        self.auth = auth
        self.signed_out: List[str] = []

    def sign_out(self, jwt: str):
        self.signed_out.append(jwt)
        self.auth.tokens.pop(jwt, None)


class FakeAuth:
    """Accounts by email, sessions by access token"""

    def __init__(self):
        self.accounts: Dict[str, dict] = {}
        self.tokens: Dict[str, SimpleNamespace] = {}
        self.admin = FakeAdminAuth(self)

    def add_user(self, email: str, password: str = "Passw0rd!", user_id: Optional[str] = None) -> SimpleNamespace:
        user = SimpleNamespace(id=user_id or str(uuid4()), email=email)
        self.accounts[email] = {"user": user, "password": password}
        return user

    def issue_token(self, user: SimpleNamespace) -> str:
        token = f"token-{uuid4().hex}"
        self.tokens[token] = user
        return token

    def _session_response(self, user: SimpleNamespace):
        session = SimpleNamespace(access_token=self.issue_token(user), refresh_token=f"refresh-{uuid4().hex}")
        return SimpleNamespace(user=user, session=session)

    def get_user(self, jwt: str):
        return SimpleNamespace(user=self.tokens.get(jwt))

    def sign_in_with_password(self, credentials: dict):
        account = self.accounts.get(credentials["email"])
        if account is None or account["password"] != credentials["password"]:
            raise FakeAuthApiError("Invalid login credentials", 400, "invalid_credentials")
        return self._session_response(account["user"])

    def sign_up(self, credentials: dict):
        if credentials["email"] in self.accounts:
            raise FakeAuthApiError("User already registered", 422, "user_already_exists")
        user = self.add_user(credentials["email"], credentials["password"])
        user.user_metadata = credentials.get("options", {}).get("data", {})
        return self._session_response(user)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def upload(self, path: str, data: bytes, file_options: Optional[dict] = None):
        self.storage.objects[(self.name, path)] = (data, (file_options or {}).get("content-type"))
        return SimpleNamespace(path=path)

    def get_public_url(self, path: str) -> str:
        return f"https://fake.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.objects: Dict[tuple, tuple] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    """Drop-in for supabase.Client in repositories and gateways"""

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.calls: List[tuple] = []
        self.rpc_calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self.lock = threading.RLock()
        self.auth = FakeAuth()
        self.storage = FakeStorage()

    def rows(self, table: str) -> List[dict]:
        return self.tables.setdefault(table, [])

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        return FakeRpc(self, name, params)

    def insert_row(self, table: str, row: dict) -> dict:
        row.setdefault("id", str(uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        for columns in UNIQUE_KEYS.get(table, []):
            for existing in self.rows(table):
                if all(_same(existing.get(c), row.get(c)) for c in columns):
                    raise APIError({
                        "code": "23505",
                        "message": f'duplicate key value violates unique constraint "{table}_{"_".join(columns)}_key"',
                        "details": f"Key ({', '.join(columns)}) already exists.",
                        "hint": None,
                    })
        self.rows(table).append(row)
        return row


class StaticIdentity(IIdentityProvider):
    """Identity provider that always answers with the same user (or None)"""

    def __init__(self, user: Optional[AuthUser]):
        self.user = user

    async def get_current_user(self) -> Optional[AuthUser]:
        return self.user


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
