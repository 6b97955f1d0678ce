"""Domain models for the generated recipe library."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class StoredRecipe:
    """Recipe row persisted in the shared library."""

    id: str
    fingerprint: str
    name: str
    meal_type: str
    cuisine_type: str
    calories: float
    created_at: datetime | None


@dataclass(frozen=True)
class SaveResult:
    """Result of saving a single recipe."""

    saved: bool
    id: str | None


@dataclass(frozen=True)
class BatchSaveResult:
    """Aggregate result of saving a plan's recipes."""

    saved: int
    duplicates: int
    failed: int = 0
    saved_ids: list[str] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)
