"""Flattening of notification policy API responses back into policy blocks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

_HOUR_KEYS = (
    ("start_min", "startMin"),
    ("start_hour", "startHour"),
    ("end_min", "endMin"),
    ("end_hour", "endHour"),
)


def flatten_duration(duration: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API duration into a single-element list of duration blocks."""
    return [
        {
            "time_amount": duration.get("timeAmount", 0),
            "time_unit": duration.get("timeUnit", ""),
        }
    ]


def _with_duration(action: Mapping[str, Any]) -> dict[str, Any]:
    element: dict[str, Any] = {}
    if action.get("duration") is not None:
        element["duration"] = flatten_duration(action["duration"])
    return element


def flatten_auto_close_action(action: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API auto-close action into a list of auto-close blocks."""
    return [_with_duration(action)]


def flatten_auto_restart_action(action: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API auto-restart action into a list of auto-restart blocks."""
    element = _with_duration(action)
    element["max_repeat_count"] = action.get("maxRepeatCount", 0)
    return [element]


def flatten_de_duplication_action(action: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API de-duplication action into a list of de-duplication blocks."""
    element = _with_duration(action)
    element["de_duplication_action_type"] = action.get("deDuplicationActionType", "")
    element["count"] = action.get("count", 0)
    return [element]


def flatten_delay_action(action: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API delay action into a list of delay blocks."""
    element = _with_duration(action)
    element["delay_option"] = action.get("delayOption", "")
    element["until_minute"] = action.get("untilMinute")
    element["until_hour"] = action.get("untilHour")
    return [element]


def flatten_filter_conditions(
    conditions: Iterable[Mapping[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Turn API conditions into condition blocks."""
    return [
        {
            "field": condition.get("field"),
            "operation": condition.get("operation"),
            "key": condition.get("key", ""),
            "not": condition.get("not"),
            "expected_value": condition.get("expectedValue", ""),
            "order": condition.get("order"),
        }
        for condition in conditions or ()
    ]


def flatten_filter(policy_filter: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API filter into a single-element list of filter blocks."""
    element: dict[str, Any] = {}
    if policy_filter.get("conditions") is not None:
        element["conditions"] = flatten_filter_conditions(policy_filter["conditions"])
    element["type"] = policy_filter.get("conditionMatchType", "")
    return [element]


def _flatten_hours(item: Mapping[str, Any]) -> dict[str, Any]:
    return {block_key: item.get(api_key) for block_key, api_key in _HOUR_KEYS}


def flatten_time_restriction(restriction: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Turn an API time restriction into a single-element list of blocks."""
    element: dict[str, Any] = {}
    restriction_list = restriction.get("restrictionList") or []
    if restriction_list:
        element["restrictions"] = [
            {
                **_flatten_hours(item),
                "start_day": item.get("startDay"),
                "end_day": item.get("endDay"),
            }
            for item in restriction_list
        ]
    else:
        element["restriction"] = [_flatten_hours(restriction.get("restriction") or {})]
    element["type"] = restriction.get("type", "")
    return [element]