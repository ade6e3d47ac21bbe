"""
In-memory stand-in for the parts of supabase.Client the services call.

Rows live in plain dicts per table. Unique columns raise FakeAPIError with
Postgres code 23505, like PostgREST does. Every table/rpc/storage call is
recorded in ``calls`` so tests can assert what reached the backend, and
``fail`` makes a given operation raise.
"""

import itertools
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

UNIQUE_COLUMNS = {
    "profiles": ("user_id", "username"),
}


class FakeAPIError(Exception):
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeQuery:
    def __init__(self, client: "FakeSupabase", table: str):
        self.client = client
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters: List[tuple] = []
        self.order_by: Optional[tuple] = None
        self.limit_n: Optional[int] = None

    def select(self, columns: str = "*"):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        keys = [c.strip() for c in self.columns.split(",")]
        return {k: row.get(k) for k in keys}

    def execute(self):
        self.client.calls.append((self.table, self.op, self.payload, list(self.filters)))
        self.client.maybe_fail(f"{self.table}.{self.op}")
        rows = self.client.tables.setdefault(self.table, [])

        if self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.client.insert_row(self.table, p) for p in payloads]
            return SimpleNamespace(data=[dict(r) for r in created])

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in matched])

        if self.op == "delete":
            self.client.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=[dict(r) for r in matched])

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda r: r.get(column) or 0, reverse=desc)
        if self.limit_n is not None:
            matched = matched[:self.limit_n]
        return SimpleNamespace(data=[self._project(r) for r in matched])


class FakeRpc:
    def __init__(self, client: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.client = client
        self.name = name
        self.params = params

    def execute(self):
        self.client.calls.append(("rpc", self.name, self.params, []))
        self.client.maybe_fail(f"rpc.{self.name}")
        handler = self.client.rpc_handlers.get(self.name)
        if handler is None:
            raise FakeAPIError(f"Could not find the function public.{self.name}", code="PGRST202")
        return SimpleNamespace(data=handler(self.client, self.params))


class FakeBucket:
    def __init__(self, client: "FakeSupabase", name: str):
        self.client = client
        self.name = name

    def upload(self, path, file, file_options=None):
        self.client.calls.append(("storage", "upload", path, [file_options]))
        self.client.maybe_fail("storage.upload")
        self.client.objects[(self.name, path)] = file
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://fake.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self, client: "FakeSupabase"):
        self.client = client

    def from_(self, bucket):
        return FakeBucket(self.client, bucket)


class FakeAuth:
    def __init__(self, client: "FakeSupabase"):
        self.client = client
        self.users: Dict[str, SimpleNamespace] = {}
        self.tokens: Dict[str, str] = {}
        self.confirm_email = False

    def add_user(self, user_id: str, email: str, token: Optional[str] = None) -> SimpleNamespace:
        user = SimpleNamespace(id=user_id, email=email, user_metadata={}, password=None)
        self.users[user_id] = user
        if token:
            self.tokens[token] = user_id
        return user

    def get_user(self, jwt=None):
        self.client.calls.append(("auth", "get_user", jwt, []))
        self.client.maybe_fail("auth.get_user")
        user_id = self.tokens.get(jwt)
        if user_id is None:
            raise FakeAPIError("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.users[user_id])

    def sign_up(self, credentials):
        self.client.calls.append(("auth", "sign_up", credentials["email"], []))
        self.client.maybe_fail("auth.sign_up")
        if any(u.email == credentials["email"] for u in self.users.values()):
            raise FakeAPIError("User already registered")
        user_id = f"00000000-0000-4000-8000-{next(self.client.ids):012d}"
        user = self.add_user(user_id, credentials["email"])
        user.password = credentials["password"]
        if self.confirm_email:
            return SimpleNamespace(user=user, session=None)
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))

    def sign_in_with_password(self, credentials):
        for user in self.users.values():
            if user.email == credentials["email"] and user.password == credentials["password"]:
                token = f"token-{user.id}"
                self.tokens[token] = user.id
                return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))
        raise FakeAPIError("Invalid login credentials")

    def sign_out(self):
        return None


def create_profile_for_user(client: "FakeSupabase", params: Dict[str, Any]) -> str:
    """Mirrors the SECURITY DEFINER function: inserts and returns the new id"""
    row = client.insert_row("profiles", {
        "user_id": params["p_user_id"],
        "username": params["p_username"],
        "display_name": params["p_display_name"],
    })
    return row["id"]


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {"profiles": [], "sections": []}
        self.objects: Dict[tuple, bytes] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}
        self.ids = itertools.count(1)
        self.rpc_handlers: Dict[str, Callable] = {"create_profile_for_user": create_profile_for_user}
        self.auth = FakeAuth(self)
        self.storage = FakeStorage(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def fail(self, operation: str, error: Optional[Exception] = None):
        """Make e.g. "profiles.insert", "rpc.create_profile_for_user" or "storage.upload" raise"""
        self.failures[operation] = error or FakeAPIError(f"{operation} failed")

    def maybe_fail(self, operation: str):
        if operation in self.failures:
            raise self.failures[operation]

    def insert_row(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = self.tables.setdefault(table, [])
        for column in UNIQUE_COLUMNS.get(table, ()):
            if any(r.get(column) == payload.get(column) for r in rows):
                raise FakeAPIError(
                    f'duplicate key value violates unique constraint "{table}_{column}_key"',
                    code="23505",
                )
        now = datetime.now(timezone.utc).isoformat()
        row = {"id": f"{table[:4]}-{next(self.ids)}", "created_at": now, "updated_at": None}
        row.update(payload)
        rows.append(row)
        return row

    def calls_to(self, table: str, op: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == table and c[1] == op]
