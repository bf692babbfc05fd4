import pytest

from terreno.config import get_settings
from terreno.models import Property, Project
from terreno.predicates import (
    EQ,
    GTE,
    IEQ,
    ILIKE,
    IN,
    LTE,
    NEQ,
    AllOf,
    AnyOf,
    Condition,
)

RIYADH = (24.7136, 46.6753)
JEDDAH = (21.4858, 39.1925)


@pytest.fixture(autouse=True)
def supabase_env(monkeypatch):
    """Credenciales falsas: ningún test habla con Supabase."""
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "test-key")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def resolve_path(row: dict, column: str):
    value = row
    for part in column.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def matches(row: dict, predicate) -> bool:
    """Evalúa un predicado sobre una fila en memoria, como lo haría PostgREST."""
    if isinstance(predicate, AnyOf):
        return any(matches(row, b) for b in predicate.branches)
    if isinstance(predicate, AllOf):
        return all(matches(row, b) for b in predicate.branches)

    assert isinstance(predicate, Condition)
    value = resolve_path(row, predicate.column)
    target = predicate.value
    if predicate.op == EQ:
        return value == target
    if predicate.op == NEQ:
        return value != target
    if predicate.op == IN:
        return value in target
    if predicate.op == GTE:
        return value is not None and value >= target
    if predicate.op == LTE:
        return value is not None and value <= target
    if predicate.op == ILIKE:
        return value is not None and str(target).lower() in str(value).lower()
    if predicate.op == IEQ:
        return value is not None and str(target).lower() == str(value).lower()
    raise AssertionError(predicate.op)


class FakeCellStore:
    """
    Tabla en memoria con la misma interfaz que CellIndexedRepository.

    ``apply_token_batch`` valida todo el lote antes de aplicar nada, como
    la RPC transaccional. ``failures`` simula caídas del store.
    """

    TABLE = ""

    def __init__(self, rows=()):
        self.rows = {row["id"]: dict(row) for row in rows}
        self.failures = 0
        self.fail_on_id = None
        self.apply_calls = 0
        self.calls = []

    def get_by_id(self, entity_id):
        row = self.rows.get(entity_id)
        return dict(row) if row else None

    def _sorted(self, rows):
        return sorted(rows, key=lambda r: r["id"])

    def find_missing_tokens(self, columns, limit):
        pending = [
            {"id": r["id"], "latitude": r["latitude"], "longitude": r["longitude"]}
            for r in self.rows.values()
            if r.get("latitude") is not None
            and r.get("longitude") is not None
            and any(not r.get(column) for column in columns)
        ]
        return self._sorted(pending)[:limit]

    def apply_token_batch(self, updates):
        self.apply_calls += 1
        if self.failures:
            self.failures -= 1
            raise ConnectionError("store no disponible")
        for update in updates:
            if update["id"] not in self.rows or update["id"] == self.fail_on_id:
                raise RuntimeError(f"fila rechazada: {update['id']}")
        for update in updates:
            self.rows[update["id"]].update(update)
        return len(updates)

    def find_similarity_candidates(self, exclude_id, prefilter, select, limit):
        self.calls.append({"exclude_id": exclude_id, "prefilter": prefilter, "limit": limit})
        found = [
            dict(r) for r in self.rows.values()
            if r["id"] != exclude_id and matches(r, prefilter)
        ]
        return self._sorted(found)[:limit]


class FakePropertyStore(FakeCellStore):
    TABLE = "properties"

    def find_in_cells(self, column, tokens, predicates, limit):
        self.calls.append({"column": column, "tokens": set(tokens), "limit": limit})
        found = [
            dict(r) for r in self.rows.values()
            if r.get(column) in tokens and all(matches(r, p) for p in predicates)
        ]
        return self._sorted(found)[:limit]


class FakeProjectStore(FakeCellStore):
    TABLE = "projects"


def make_property(id, latitude=RIYADH[0], longitude=RIYADH[1], **overrides) -> dict:
    """Fila de 'properties' armada por el camino de escritura real."""
    fields = {
        "title": f"Listing {id}",
        "price": 500000,
        "type": "apartment",
        "category": "residential",
        "city": "Riyadh",
        "latitude": latitude,
        "longitude": longitude,
    }
    extra = {
        key: overrides.pop(key)
        for key in ("owner", "media", "project")
        if key in overrides
    }
    fields.update(overrides)
    row = Property(**fields).to_db_dict()
    row["id"] = id
    row["owner"] = extra.get("owner", {"role": "OWNER", "broker": None})
    row["media"] = extra.get("media", [])
    if "project" in extra:
        row["project"] = extra["project"]
    return row


def make_project(id, latitude=RIYADH[0], longitude=RIYADH[1], units=(), **overrides) -> dict:
    fields = {
        "name": f"Project {id}",
        "type": "apartment",
        "category": "residential",
        "city": "Riyadh",
        "latitude": latitude,
        "longitude": longitude,
    }
    fields.update(overrides)
    row = Project(**fields).to_db_dict()
    row["id"] = id
    row["properties"] = [dict(unit) for unit in units]
    row["media"] = []
    return row


def legacy_row(id, latitude=RIYADH[0], longitude=RIYADH[1], **tokens) -> dict:
    """Fila vieja sin tokens calculados."""
    row = {
        "id": id,
        "latitude": latitude,
        "longitude": longitude,
        "s2_l6": None,
        "s2_l8": None,
        "s2_l10": None,
        "s2_l12": None,
        "s2_l16": None,
    }
    row.update(tokens)
    return row
