"""Core data models for PlanWatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

JSONPath = Tuple[Any, ...]


@dataclass(frozen=True)
class UnitAvailability:
    """A single leasable unit advertised under a floor plan."""

    unit: str
    available_on: str
    price: str


@dataclass(frozen=True)
class FloorPlan:
    """Represents one floor plan layout and its advertised units."""

    name: str
    square_footage: str
    availability: Optional[Tuple[UnitAvailability, ...]] = None


Snapshot = List[FloorPlan]


@dataclass(frozen=True)
class Change:
    """One structural difference between two snapshots."""

    path: JSONPath
    kind: str
    previous: Any = None
    current: Any = None


@dataclass
class SnapshotDiff:
    """Holds every change found when comparing two snapshots."""

    changes: List[Change] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __len__(self) -> int:
        return len(self.changes)


@dataclass
class RunSummary:
    """Aggregated result returned by a monitoring cycle."""

    executed_at: str
    changed: bool
    diff: SnapshotDiff
    snapshot: Snapshot
    notified: bool = False
    dry_run: bool = False


def unit_to_data(unit: UnitAvailability) -> dict:
    return {
        "unit": unit.unit,
        "available_on": unit.available_on,
        "price": unit.price,
    }


def floor_plan_to_data(plan: FloorPlan) -> dict:
    availability = None
    if plan.availability is not None:
        availability = [unit_to_data(unit) for unit in plan.availability]
    return {
        "name": plan.name,
        "square_footage": plan.square_footage,
        "availability": availability,
    }


def snapshot_to_data(snapshot: Sequence[FloorPlan]) -> List[dict]:
    """Convert a snapshot into JSON-ready structures."""
    return [floor_plan_to_data(plan) for plan in snapshot]


def snapshot_from_data(data: Any) -> Snapshot:
    """Rebuild a snapshot from decoded JSON, rejecting unexpected shapes."""
    if not isinstance(data, list):
        raise ValueError(f"Snapshot payload must be a list, got {type(data).__name__}")

    snapshot: Snapshot = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Floor plan #{index} is not an object: {item!r}")
        raw_units = item.get("availability")
        availability = None
        if raw_units is not None:
            if not isinstance(raw_units, list):
                raise ValueError(f"Floor plan #{index} availability must be a list or null")
            availability = tuple(_unit_from_data(unit) for unit in raw_units)
        snapshot.append(
            FloorPlan(
                name=str(item.get("name", "")),
                square_footage=str(item.get("square_footage", "")),
                availability=availability,
            )
        )
    return snapshot


def _unit_from_data(data: Any) -> UnitAvailability:
    if not isinstance(data, dict):
        raise ValueError(f"Unit entry is not an object: {data!r}")
    return UnitAvailability(
        unit=str(data.get("unit", "")),
        available_on=str(data.get("available_on", "")),
        price=str(data.get("price", "")),
    )
