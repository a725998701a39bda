"""Expansion and flattening of maintenance windows and their rules."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

TIME_LAYOUT = "%Y-%m-%dT%H:%M:%SZ"
SCHEDULE = "schedule"
INTEGRATION = "integration"
DISABLED = "disabled"

CHANGE_END_DATE = "change-end-date"
UPDATE = "update"


class MaintenanceError(ValueError):
    """Raised when a maintenance configuration or operation is invalid."""


def _parse_date(value: Any) -> datetime:
    if not isinstance(value, str):
        raise MaintenanceError(f"invalid maintenance date: {value!r}")
    try:
        return datetime.strptime(value, TIME_LAYOUT).replace(tzinfo=timezone.utc)
    except ValueError as exc:
        raise MaintenanceError(f"invalid maintenance date {value!r}: {exc}") from exc


def _format_date(value: datetime | None) -> str:
    if value is None:
        raise MaintenanceError("maintenance time has no start or end date")
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIME_LAYOUT)


@dataclass
class MaintenanceTime:
    """The time window of a maintenance."""

    type: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None

    def to_api(self) -> dict[str, Any]:
        """Return the time window as the API expects it."""
        result: dict[str, Any] = {"type": self.type}
        if self.start_date is not None:
            result["startDate"] = _format_date(self.start_date)
        if self.end_date is not None:
            result["endDate"] = _format_date(self.end_date)
        return result

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "MaintenanceTime":
        """Build a time window from an API response."""
        start = data.get("startDate")
        end = data.get("endDate")
        return cls(
            type=data.get("type", ""),
            start_date=None if start is None else _parse_date(start),
            end_date=None if end is None else _parse_date(end),
        )


@dataclass
class MaintenanceRule:
    """A rule naming an entity and the state it is put in during maintenance."""

    entity: dict[str, str] = field(default_factory=lambda: {"id": "", "type": ""})
    state: str = ""

    def to_api(self) -> dict[str, Any]:
        """Return the rule as the API expects it."""
        return {"entity": dict(self.entity), "state": self.state}


def expand_entity(items: Iterable[Mapping[str, Any]] | None) -> dict[str, str]:
    """Turn entity blocks into an API entity; the last block wins."""
    entity = {"id": "", "type": ""}
    for item in items or ():
        entity = {"id": item.get("id") or "", "type": item.get("type") or ""}
    return entity


def expand_rules(items: Iterable[Mapping[str, Any]] | None) -> list[MaintenanceRule]:
    """Turn rule blocks into rules; integrations are always disabled."""
    rules = []
    for item in items or ():
        if item.get("entity") is None:
            raise MaintenanceError('"entity" is required in rules')
        entity = expand_entity(item["entity"])
        state = item.get("state") or ""
        if entity["type"] == INTEGRATION:
            state = DISABLED
        rules.append(MaintenanceRule(entity=entity, state=state))
    return rules


def expand_time(items: Iterable[Mapping[str, Any]] | None) -> MaintenanceTime:
    """Turn time blocks into a time window; the last block wins."""
    result = MaintenanceTime()
    for item in items or ():
        kind = item.get("type")
        if kind is None:
            raise MaintenanceError('"type" is required in time')
        start = item.get("start_date")
        end = item.get("end_date")
        if kind == SCHEDULE and (start is None or end is None):
            raise MaintenanceError(
                "Schedule type maintenance's must have start and end dates"
            )
        result = MaintenanceTime(
            type=kind, start_date=_parse_date(start), end_date=_parse_date(end)
        )
    return result


def flatten_time(maintenance_time: MaintenanceTime) -> list[dict[str, Any]]:
    """Turn a time window into a single-element list of time blocks."""
    return [
        {
            "type": maintenance_time.type,
            "start_date": _format_date(maintenance_time.start_date),
            "end_date": _format_date(maintenance_time.end_date),
        }
    ]


def plan_update(status: str) -> str:
    """Return how a maintenance with the given status may be changed."""
    if status == "active":
        return CHANGE_END_DATE
    if status == "planned":
        return UPDATE
    raise MaintenanceError(f"You cannot edit {status} maintenances")


def build_create_request(config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the request that creates a maintenance."""
    description = config.get("description")
    if description is None:
        raise MaintenanceError('"description" is required')
    rules = config.get("rules")
    if rules is None:
        raise MaintenanceError('"rules" is required')
    return {
        "description": description,
        "time": expand_time(config.get("time")).to_api(),
        "rules": [rule.to_api() for rule in expand_rules(rules)],
    }