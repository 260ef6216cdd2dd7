"""
Pytest configuration and shared fixtures.

Adds the project root to the Python path so that tests can import from the
domain, repositories, services and api modules, and provides an in-memory
stand-in for the Supabase client so that repository and service code runs
unchanged without a database.

The stand-in implements the subset of the postgrest query builder the
repositories use (select/insert/update/eq/in_/order/limit), the unique
indexes declared in sql/schema.sql, and the two transactional functions in
sql/functions.sql. Every execute() runs under one lock, mirroring the row
locking PostgreSQL gives a single statement.
"""

from __future__ import annotations

import copy
import sys
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from postgrest.exceptions import APIError  # noqa: E402

import repositories.client  # noqa: E402


# Columns that must be unique when not null (partial unique indexes).
UNIQUE_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "vehicles": ("vehicle_id",),
    "customers": ("customer_id", "document"),
    "salespeople": ("salesperson_id", "employee_code"),
    "sales": ("sale_id",),
    "payments": ("payment_id",),
}


@dataclass
class FakeResponse:
    data: Any
    count: Optional[int] = None
    error: Any = None


def _sort_key(value: Any) -> Tuple[int, Any]:
    if value is None:
        return (2, "")
    if isinstance(value, bool):
        return (1, str(value))
    if isinstance(value, (int, float, Decimal)):
        return (0, Decimal(str(value)))
    try:
        return (0, Decimal(str(value)))
    except InvalidOperation:
        return (1, str(value))


class FakeQuery:
    """Chainable query against one table of a FakeSupabase."""

    def __init__(self, store: "FakeSupabase", table: str) -> None:
        self._store = store
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._payload: Any = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order: Optional[Tuple[str, bool]] = None
        self._limit: Optional[int] = None

    # Operations

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self._op = "select"
        self._columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._op = "insert"
        self._payload = payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self._op = "update"
        self._payload = payload
        return self

    # Filters and modifiers

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        allowed = list(values)
        self._filters.append(lambda row: row.get(column) in allowed)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def execute(self) -> FakeResponse:
        with self._store.lock:
            self._store.run_hooks(self._op, self._table)
            rows = self._store.tables.setdefault(self._table, [])

            if self._op == "insert":
                payloads = self._payload if isinstance(self._payload, list) else [self._payload]
                inserted = [self._store.insert_row(self._table, dict(p)) for p in payloads]
                return FakeResponse(data=copy.deepcopy(inserted))

            matched = [row for row in rows if all(f(row) for f in self._filters)]

            if self._op == "update":
                for row in matched:
                    row.update(copy.deepcopy(self._payload))
                return FakeResponse(data=copy.deepcopy(matched))

            if self._order is not None:
                column, desc = self._order
                matched = sorted(matched, key=lambda r: _sort_key(r.get(column)), reverse=desc)
            if self._limit is not None:
                matched = matched[: self._limit]

            if self._columns.strip() == "*":
                data = copy.deepcopy(matched)
            else:
                wanted = [c.strip() for c in self._columns.split(",")]
                data = [{c: row.get(c) for c in wanted} for row in matched]
            return FakeResponse(data=data, count=len(data))


class FakeRpc:
    def __init__(self, store: "FakeSupabase", name: str, params: Dict[str, Any]) -> None:
        self._store = store
        self._name = name
        self._params = params

    def execute(self) -> FakeResponse:
        with self._store.lock:
            self._store.run_hooks("rpc", self._name)
            handler = getattr(self._store, f"_rpc_{self._name}", None)
            if handler is None:
                raise APIError({"code": "PGRST202", "message": f"Could not find function {self._name}"})
            data = handler(**self._params)
            self._store.run_after_hooks("rpc", self._name)
            return FakeResponse(data=data)


class FakeSupabase:
    """In-memory Supabase client used by the test suite."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [] for name in UNIQUE_COLUMNS
        }
        self.rpc_calls: List[Tuple[str, Dict[str, Any]]] = []
        self._hooks: List[Tuple[str, str, Callable[[], None]]] = []
        self._after_hooks: List[Tuple[str, str, Callable[[], None]]] = []

    # Client surface used by repositories

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Dict[str, Any]) -> FakeRpc:
        self.rpc_calls.append((name, dict(params)))
        return FakeRpc(self, name, params)

    # Failure and race injection

    def before_next(self, operation: str, target: str, action: Callable[[], None]) -> None:
        """
        Run `action` once, just before the next `operation` on `target`.

        operation is "select", "insert", "update" or "rpc"; target is a table
        or function name. The action may mutate the store (to simulate a
        concurrent writer) or raise (to simulate a store failure).
        """
        self._hooks.append((operation, target, action))

    def fail_next(self, operation: str, target: str, exc: Exception) -> None:
        def _raise() -> None:
            raise exc

        self.before_next(operation, target, _raise)

    def fail_after_next(self, operation: str, target: str, exc: Exception) -> None:
        """
        Raise `exc` once, right after the next `operation` on `target` has
        been applied. Simulates a write that committed but whose reply was
        lost. Only "rpc" operations run these.
        """

        def _raise() -> None:
            raise exc

        self._after_hooks.append((operation, target, _raise))

    def run_hooks(self, operation: str, target: str) -> None:
        self._run_first(self._hooks, operation, target)

    def run_after_hooks(self, operation: str, target: str) -> None:
        self._run_first(self._after_hooks, operation, target)

    @staticmethod
    def _run_first(
        hooks: List[Tuple[str, str, Callable[[], None]]], operation: str, target: str
    ) -> None:
        for hook in list(hooks):
            op, tgt, action = hook
            if op == operation and tgt == target:
                hooks.remove(hook)
                action()
                return

    # Row helpers

    def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        with self.lock:
            rows = self.tables.setdefault(table, [])
            for column in UNIQUE_COLUMNS.get(table, ()):
                value = row.get(column)
                if value is not None and any(r.get(column) == value for r in rows):
                    raise APIError({
                        "code": "23505",
                        "message": f'duplicate key value violates unique constraint on "{table}.{column}"',
                        "details": f"Key ({column})=({value}) already exists.",
                        "hint": None,
                    })
            rows.append(row)
            return row

    def rows(self, table: str) -> List[Dict[str, Any]]:
        with self.lock:
            return copy.deepcopy(self.tables.get(table, []))

    def row(self, table: str, column: str, value: Any) -> Optional[Dict[str, Any]]:
        for r in self.rows(table):
            if r.get(column) == value:
                return r
        return None

    def add_vehicle(
        self,
        status: str = "Available",
        sale_price: str = "45000.00",
        vehicle_id: Optional[UUID] = None,
        **extra: Any,
    ) -> UUID:
        vehicle_id = vehicle_id or uuid4()
        row = {
            "vehicle_id": str(vehicle_id),
            "vin_number": "9BWZZZ377VT004251",
            "license_plate": "ABC1D23",
            "mileage": 30000,
            "purchase_price": "38000.00",
            "sale_price": sale_price,
            "status": status,
            "notes": None,
            "model_year_id": None,
            "reserved_sale_id": None,
            "created_at_utc": _iso_now(),
            "updated_at_utc": None,
        }
        row.update(extra)
        self.insert_row("vehicles", row)
        return vehicle_id

    def add_customer(self, document: Optional[str], name: str = "Existing Buyer", **extra: Any) -> UUID:
        customer_id = uuid4()
        row = {
            "customer_id": str(customer_id),
            "name": name,
            "email": "existing@example.com",
            "phone": None,
            "address": None,
            "document": document,
            "is_active": True,
            "created_at_utc": _iso_now(),
            "updated_at_utc": None,
        }
        row.update(extra)
        self.insert_row("customers", row)
        return customer_id

    def add_salesperson(
        self,
        name: str = "Paula Lima",
        employee_code: Optional[str] = None,
        is_active: bool = True,
        created_at_utc: Optional[str] = None,
    ) -> UUID:
        salesperson_id = uuid4()
        self.insert_row("salespeople", {
            "salesperson_id": str(salesperson_id),
            "name": name,
            "email": f"{name.split()[0].lower()}@example.com",
            "phone": None,
            "employee_code": employee_code,
            "commission_rate": "0.05",
            "is_active": is_active,
            "created_at_utc": created_at_utc or _iso_now(),
            "updated_at_utc": None,
        })
        return salesperson_id

    # Transactional functions (mirror sql/functions.sql)

    def _rpc_register_sale_atomic(self, **p: Any) -> Dict[str, Any]:
        references = (
            ("vehicles", "vehicle_id", p["p_vehicle_id"]),
            ("customers", "customer_id", p["p_customer_id"]),
            ("salespeople", "salesperson_id", p["p_salesperson_id"]),
        )
        for table, column, value in references:
            if not any(r.get(column) == value for r in self.tables[table]):
                return {
                    "success": False,
                    "error": "INSERT_REJECTED",
                    "message": f"insert violates foreign key on {table}",
                }

        snapshot = copy.deepcopy(self.tables)
        try:
            self.insert_row("sales", {
                "sale_id": p["p_sale_id"],
                "vehicle_id": p["p_vehicle_id"],
                "customer_id": p["p_customer_id"],
                "salesperson_id": p["p_salesperson_id"],
                "sale_date_utc": p["p_sale_date"],
                "total_amount": p["p_total_amount"],
                "commission_amount": p["p_commission_amount"],
                "notes": p["p_sale_notes"],
                "created_at_utc": _iso_now(),
                "updated_at_utc": None,
            })
            self.insert_row("payments", {
                "payment_id": p["p_payment_id"],
                "sale_id": p["p_sale_id"],
                "amount": p["p_payment_amount"],
                "payment_date_utc": p["p_payment_date"],
                "payment_type": p["p_payment_type"],
                "status": p["p_payment_status"],
                "transaction_id": p["p_transaction_id"],
                "notes": p["p_payment_notes"],
                "created_at_utc": _iso_now(),
                "updated_at_utc": None,
            })
        except APIError as exc:
            self.tables = snapshot
            return {"success": False, "error": "INSERT_REJECTED", "message": exc.message}

        return {"success": True, "sale_id": p["p_sale_id"], "payment_id": p["p_payment_id"]}

    def _rpc_settle_payment_atomic(self, **p: Any) -> Dict[str, Any]:
        payment = next((r for r in self.tables["payments"] if r["payment_id"] == p["p_payment_id"]), None)
        vehicle = next((r for r in self.tables["vehicles"] if r["vehicle_id"] == p["p_vehicle_id"]), None)

        if payment is None or vehicle is None:
            return {"success": False, "error": "NOT_FOUND", "message": "Payment or vehicle no longer exists"}

        if (
            payment["status"] != p["p_expected_payment_status"]
            or vehicle["status"] != p["p_expected_vehicle_status"]
        ):
            return {
                "success": False,
                "error": "STATE_CHANGED",
                "message": f"payment={payment['status']} vehicle={vehicle['status']}",
            }

        reserved_for = vehicle.get("reserved_sale_id")
        if reserved_for is not None and reserved_for != p["p_sale_id"]:
            return {
                "success": False,
                "error": "STATE_CHANGED",
                "message": f"vehicle reserved for sale {reserved_for}",
            }

        payment["status"] = p["p_payment_status"]
        payment["updated_at_utc"] = p["p_settled_at"]
        vehicle["status"] = p["p_vehicle_status"]
        if p["p_vehicle_status"] == "Available":
            vehicle["reserved_sale_id"] = None
        vehicle["updated_at_utc"] = p["p_settled_at"]
        return {
            "success": True,
            "payment_status": p["p_payment_status"],
            "vehicle_status": p["p_vehicle_status"],
        }


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@pytest.fixture
def fake_supabase(monkeypatch: pytest.MonkeyPatch) -> FakeSupabase:
    """Install a fresh in-memory store as the shared Supabase client."""

    store = FakeSupabase()
    monkeypatch.setattr(repositories.client, "_client", store)
    return store


@pytest.fixture
def api_client(fake_supabase: FakeSupabase):
    """FastAPI TestClient bound to the in-memory store."""

    from fastapi.testclient import TestClient

    from api.main import app

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
