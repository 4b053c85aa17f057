import copy
import itertools
import os
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import httpx
import pytest

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "razorpay-secret")
os.environ.pop("REVALIDATE_URL", None)

from postgrest.exceptions import APIError  # noqa: E402
from supabase import AuthError  # noqa: E402

ID_COLUMNS = {
    "orders": "order_id",
    "coupons": "coupon_id",
    "notifications": "id",
    "products": "product_id",
}


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.filters: List[tuple] = []
        self.or_filters: List[str] = []
        self.payload: Any = None
        self.order_by: Optional[tuple] = None
        self.limit_to: Optional[int] = None

    def select(self, columns: str = "*") -> "FakeQuery":
        self.columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload: Dict[str, Any], on_conflict: str = "") -> "FakeQuery":
        self.op, self.payload = "upsert", payload
        self.on_conflict = on_conflict
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def or_(self, expression: str) -> "FakeQuery":
        self.or_filters.append(expression)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.limit_to = count
        return self

    def _matches_or(self, row: Dict[str, Any], expression: str) -> bool:
        for clause in expression.split(","):
            column, op, value = clause.split(".", 2)
            if op == "is" and value == "null" and row.get(column) is None:
                return True
            if op == "gte" and row.get(column) is not None:
                if _as_datetime(row[column]) >= _as_datetime(value):
                    return True
        return False

    def _matches(self, row: Dict[str, Any]) -> bool:
        if any(row.get(column) != value for column, value in self.filters):
            return False
        return all(self._matches_or(row, expr) for expr in self.or_filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in self.columns.split(",")]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.op))
        if (self.table, self.op) in self.db.failures:
            raise APIError({"message": f"{self.table} {self.op} failed", "code": "500"})
        rows = self.db.tables.setdefault(self.table, [])
        if self.op == "insert":
            records = self.payload if isinstance(self.payload, list) else [self.payload]
            stored = [self.db.store(self.table, record) for record in records]
            return FakeResponse(copy.deepcopy(stored))
        if self.op == "upsert":
            row = self.db.upsert(self.table, self.payload, self.on_conflict)
            return FakeResponse([copy.deepcopy(row)])
        matched = [row for row in rows if self._matches(row)]
        if self.op == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(matched))
        if self.op == "delete":
            self.db.tables[self.table] = [row for row in rows if row not in matched]
            return FakeResponse(copy.deepcopy(matched))
        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: str(row.get(column)), reverse=desc)
        if self.limit_to is not None:
            matched = matched[: self.limit_to]
        return FakeResponse([self._project(row) for row in matched])


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: Optional[Dict[str, Any]]):
        self.db = db
        self.name = name
        self.params = params or {}

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.name, "rpc"))
        self.db.rpc_params.append((self.name, copy.deepcopy(self.params)))
        if (self.name, "rpc") in self.db.failures:
            raise APIError({"message": f"{self.name} failed", "code": "500"})
        if self.name == "get_admin_notifications":
            rows = [
                row
                for row in self.db.rows("notifications")
                if row.get("user_id") in self.db.admin_ids
            ]
            rows = sorted(rows, key=lambda row: str(row.get("created_at")), reverse=True)
            return FakeResponse(copy.deepcopy(rows[:20]))
        if self.name == "update_product_and_stock":
            product_id = self.params["p_id"]
            for row in self.db.rows("products"):
                if row.get("product_id") == product_id:
                    row.update(copy.deepcopy(self.params["p_data"]))
            self.db.upsert("stock_keeping_units", self.params["s_data"], "product_id")
            return FakeResponse(None)
        return FakeResponse([{"user_id": admin_id} for admin_id in self.db.admin_ids])


class FakeAuthError(AuthError):
    def __init__(self, message: str) -> None:
        Exception.__init__(self, message)
        self.message = message


class FakeAuthAdmin:
    """The ``auth.admin`` calls used for user management, backed by a dict of users."""

    def __init__(self, db: "FakeSupabase") -> None:
        self.db = db
        self.users: Dict[str, Dict[str, Any]] = {}

    def _check(self, op: str) -> None:
        self.db.calls.append(("auth", op))
        if ("auth", op) in self.db.failures:
            raise FakeAuthError(f"auth {op} failed")

    def add(self, user_id: str, **fields: Any) -> Dict[str, Any]:
        user = {
            "id": user_id,
            "email": fields.get("email", f"{user_id}@example.com"),
            "user_metadata": fields.get("user_metadata", {}),
            "banned_until": fields.get("banned_until"),
            "created_at": "2024-01-01T00:00:00+00:00",
            "last_sign_in_at": None,
        }
        self.users[user_id] = user
        return user

    def _get(self, user_id: str) -> Dict[str, Any]:
        if user_id not in self.users:
            raise FakeAuthError("User not found")
        return self.users[user_id]

    def list_users(self) -> List[SimpleNamespace]:
        self._check("list_users")
        return [SimpleNamespace(**user) for user in self.users.values()]

    def create_user(self, attributes: Dict[str, Any]) -> SimpleNamespace:
        self._check("create_user")
        self.db.auth_requests.append(("create_user", copy.deepcopy(attributes)))
        user = self.add(
            f"user-{next(self.db._ids)}",
            email=attributes["email"],
            user_metadata=attributes.get("user_metadata", {}),
        )
        return SimpleNamespace(user=SimpleNamespace(**user))

    def update_user_by_id(self, user_id: str, attributes: Dict[str, Any]) -> SimpleNamespace:
        self._check("update_user_by_id")
        self.db.auth_requests.append(("update_user_by_id", copy.deepcopy(attributes)))
        user = self._get(user_id)
        if "user_metadata" in attributes:
            user["user_metadata"] = {**user["user_metadata"], **attributes["user_metadata"]}
        duration = attributes.get("ban_duration")
        if duration == "none":
            user["banned_until"] = None
        elif duration:
            user["banned_until"] = "2124-01-01T00:00:00+00:00"
        return SimpleNamespace(user=SimpleNamespace(**user))

    def delete_user(self, user_id: str) -> None:
        self._check("delete_user")
        self._get(user_id)
        del self.users[user_id]


class FakeSupabase:
    """In-memory stand-in for the parts of the supabase query builder in use."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.admin_ids: List[str] = []
        self.failures: set = set()
        self.calls: List[tuple] = []
        self.rpc_params: List[tuple] = []
        self.auth_requests: List[tuple] = []
        self._ids = itertools.count(1)
        self.auth = SimpleNamespace(admin=FakeAuthAdmin(self))

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> FakeRpc:
        return FakeRpc(self, name, params)

    def store(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        row = copy.deepcopy(record)
        id_column = ID_COLUMNS.get(table, "id")
        if row.get(id_column) is None:
            next_id = next(self._ids)
            if table == "orders":
                row[id_column] = f"ORD-{next_id}"
            elif table == "products":
                row[id_column] = f"PRD-{next_id}"
            else:
                row[id_column] = next_id
        now = datetime.now(timezone.utc).isoformat()
        if table == "orders":
            row.setdefault("order_date", now)
        if table == "notifications":
            row.setdefault("is_read", False)
            row.setdefault("created_at", now)
        self.tables.setdefault(table, []).append(row)
        return row

    def upsert(self, table: str, record: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        for row in self.rows(table):
            if on_conflict and row.get(on_conflict) == record.get(on_conflict):
                row.update(copy.deepcopy(record))
                return row
        return self.store(table, record)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def order_payload() -> Dict[str, Any]:
    return {
        "cart_items": [
            {"productId": "flute-c-base", "quantity": 1, "customizations": {"scale": "C"}},
            {"productId": "flute-cover", "quantity": 2},
        ],
        "total": 1549.0,
        "shipping_details": {
            "name": "Asha Rao",
            "address": "12 MG Road, Indiranagar",
            "city": "Bengaluru, Karnataka",
            "pincode": "560038",
            "phone": "9800000000",
        },
        "order_summary": {
            "subtotal": 1500.0,
            "shipping": 99.0,
            "coupon_discount": 50.0,
            "coupon_code": "FLAT50",
            "total_discount": 50.0,
            "grand_total": 1549.0,
            "payment_method": "upi",
        },
        "payment_reference_id": "pay_123",
    }


@pytest.fixture
def mock_http(monkeypatch):
    """Route every ``httpx.AsyncClient`` through ``handler``; returns the recorded requests."""
    real_client = httpx.AsyncClient
    requests: List[httpx.Request] = []

    def install(handler):
        def recording(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        def factory(*args, **kwargs):
            kwargs["transport"] = httpx.MockTransport(recording)
            return real_client(*args, **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        return requests

    return install
