"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from mealprep_planner.adapters.supabase_rate_limit_repository import (
    SupabaseRateLimitRepository,
)
from mealprep_planner.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from mealprep_planner.domain.plans import GeneratedRecipe
from tests.conftest import recipe_payload


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None
    count: int | None = None


@dataclass
class FakeQuery:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "upsert": [],
            "delete": [],
            "rpc": [],
        }
    )
    last_payload: object | None = None
    last_options: dict[str, object] = field(default_factory=dict)
    last_filters: list[tuple[str, str, object]] = field(default_factory=list)
    count: int | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args, **kwargs) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self._action = "select"
        self.last_options = kwargs
        return self

    def upsert(self, payload, **kwargs) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_options = kwargs
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self.last_filters.append(("eq", column, value))
        return self

    def lt(self, column: str, value) -> "FakeQuery":  # type: ignore[no-untyped-def]
        self.last_filters.append(("lt", column, value))
        return self

    def limit(self, _count: int) -> "FakeQuery":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeQuery":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "rpc")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data, count=self.count)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeQuery] = field(default_factory=dict)
    functions: dict[str, FakeQuery] = field(default_factory=dict)
    rpc_calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def table(self, name: str) -> FakeQuery:
        if name not in self.tables:
            self.tables[name] = FakeQuery(name=name)
        return self.tables[name]

    def rpc(self, name: str, params: dict[str, object]) -> FakeQuery:
        self.rpc_calls.append((name, params))
        if name not in self.functions:
            self.functions[name] = FakeQuery(name=name)
        return self.functions[name]


def _recipe_row(recipe_id: str = "recipe-1") -> dict[str, object]:
    return {
        "id": recipe_id,
        "fingerprint": "abc123",
        "name": "Chicken Rice Bowl",
        "meal_type": "lunch",
        "cuisine_type": "american",
        "calories": 450,
        "created_at": "2026-03-02T12:00:00+00:00",
    }


def test_recipe_repository_find_and_list() -> None:
    client = FakeSupabaseClient()
    recipes_table = client.table("recipes")
    recipes_table.queue("select", [_recipe_row()])
    recipes_table.queue("select", [_recipe_row("recipe-2"), _recipe_row()])

    repository = SupabaseRecipeRepository(client)
    found = repository.find_by_fingerprint("abc123")
    recent = repository.list_recent(2)

    assert found is not None
    assert found.id == "recipe-1"
    assert found.created_at == datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
    assert ("eq", "fingerprint", "abc123") in recipes_table.last_filters
    assert [recipe.id for recipe in recent] == ["recipe-2", "recipe-1"]


def test_recipe_repository_find_missing() -> None:
    repository = SupabaseRecipeRepository(FakeSupabaseClient())

    assert repository.find_by_fingerprint("missing") is None


def test_recipe_repository_insert_ignores_conflicts() -> None:
    client = FakeSupabaseClient()
    recipes_table = client.table("recipes")
    recipes_table.queue("upsert", [{"id": "recipe-9"}])
    recipes_table.queue("upsert", [])
    recipe = GeneratedRecipe.model_validate(recipe_payload("Chicken Rice Bowl"))

    repository = SupabaseRecipeRepository(client)
    created = repository.insert("abc123", recipe, "lunch")
    conflicted = repository.insert("abc123", recipe, "lunch")

    assert created == "recipe-9"
    assert conflicted is None
    assert recipes_table.last_options == {
        "on_conflict": "fingerprint",
        "ignore_duplicates": True,
    }
    payload = recipes_table.last_payload
    assert isinstance(payload, dict)
    assert payload["fingerprint"] == "abc123"
    assert payload["meal_type"] == "lunch"
    assert payload["protein_grams"] == 35
    assert payload["ingredients"][0]["name"] == "chicken breast"


def test_recipe_repository_count() -> None:
    client = FakeSupabaseClient()
    client.table("recipes").count = 42

    repository = SupabaseRecipeRepository(client)

    assert repository.count() == 42
    assert client.table("recipes").last_options == {"count": "exact"}


def test_rate_limit_repository_increment_uses_function() -> None:
    client = FakeSupabaseClient()
    now = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
    client.rpc("increment_rate_limit", {}).queue(
        "rpc",
        [
            {
                "count": 3,
                "window_start": "2026-03-02T10:00:00+00:00",
                "allowed": False,
            }
        ],
    )
    client.rpc_calls.clear()

    repository = SupabaseRateLimitRepository(client)
    counter = repository.increment_and_check("device-a_generate-plan", 86400, 3, now)

    assert counter.count == 3
    assert counter.allowed is False
    assert counter.window_start == datetime(2026, 3, 2, 10, 0, tzinfo=UTC)
    assert client.rpc_calls == [
        (
            "increment_rate_limit",
            {
                "p_key": "device-a_generate-plan",
                "p_window_seconds": 86400,
                "p_limit": 3,
                "p_now": now.isoformat(),
            },
        )
    ]


def test_rate_limit_repository_increment_without_data_raises() -> None:
    repository = SupabaseRateLimitRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        repository.increment_and_check(
            "device-a_generate-plan", 86400, 3, datetime.now(tz=UTC)
        )


def test_rate_limit_repository_counter_and_cleanup() -> None:
    client = FakeSupabaseClient()
    limits_table = client.table("rate_limits")
    limits_table.queue(
        "select",
        [
            {
                "key": "device-a_swap-meal",
                "count": 2,
                "window_start": "2026-03-02T10:00:00Z",
            }
        ],
    )
    limits_table.queue("delete", [{"key": "a"}, {"key": "b"}])
    cutoff = datetime(2026, 2, 28, tzinfo=UTC)

    repository = SupabaseRateLimitRepository(client)
    counter = repository.get_counter("device-a_swap-meal")
    deleted = repository.delete_expired(cutoff)

    assert counter is not None
    assert counter.count == 2
    assert counter.allowed is True
    assert deleted == 2
    assert ("lt", "window_start", cutoff.isoformat()) in limits_table.last_filters
