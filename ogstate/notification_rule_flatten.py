"""Flattening of notification rule API responses back into rule blocks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

_HOUR_KEYS = (
    ("start_hour", "startHour"),
    ("start_min", "startMin"),
    ("end_hour", "endHour"),
    ("end_min", "endMin"),
)


def flatten_steps_contact(contact: Mapping[str, Any] | None) -> list[dict[str, Any]]:
    """Turn an API contact into a single-element list of contact blocks."""
    contact = contact or {}
    return [{"to": contact.get("to", ""), "method": contact.get("method", "")}]


def flatten_steps(steps: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Turn API notification steps into step blocks."""
    result = []
    for step in steps or ():
        element: dict[str, Any] = {
            "enabled": step.get("enabled"),
            "contact": flatten_steps_contact(step.get("contact")),
        }
        send_after = step.get("sendAfter")
        if send_after is not None:
            element["send_after"] = send_after.get("timeAmount", 0)
        result.append(element)
    return result


def _flatten_hours(item: Mapping[str, Any]) -> dict[str, Any]:
    return {block_key: item.get(api_key) for block_key, api_key in _HOUR_KEYS}


def flatten_time_restriction(restriction: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API time restriction into a single-element list of blocks."""
    element: dict[str, Any] = {"type": restriction.get("type", "")}
    restriction_list = restriction.get("restrictionList") or []
    if restriction_list:
        element["restrictions"] = [
            {
                "start_day": item.get("startDay"),
                "end_day": item.get("endDay"),
                **_flatten_hours(item),
            }
            for item in restriction_list
        ]
    else:
        element["restriction"] = [_flatten_hours(restriction.get("restriction") or {})]
    return [element]


def flatten_schedules(schedules: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Turn API schedules into schedule blocks; the type is always "schedule"."""
    return [{"type": "schedule", "name": schedule.get("name")} for schedule in schedules or ()]