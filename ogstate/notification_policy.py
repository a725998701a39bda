"""Validation and request building for team notification policies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

FILTER_TYPES = ("match-all", "match-any-condition", "match-all-conditions")
CONDITION_FIELDS = (
    "message", "alias", "description", "source", "entity", "tags",
    "actions", "details", "extra-properties", "recipients", "teams", "priority",
)
CONDITION_OPERATIONS = (
    "matches", "contains", "starts-with", "ends-with", "equals", "contains-key",
    "contains-value", "greater-than", "less-than", "is-empty", "equals-ignore-whitespace",
)
TIME_RESTRICTION_TYPES = ("time-of-day", "weekday-and-time-of-day")
TIME_UNITS = ("days", "hours", "minutes")
DE_DUPLICATION_TYPES = ("value-based", "frequency-based")
DELAY_OPTIONS = (
    "for-duration", "next-time", "next-weekday", "next-monday", "next-tuesday",
    "next-wednesday", "next-thursday", "next-friday", "next-saturday", "next-sunday",
)

_TOP_LEVEL_KEYS = {
    "name", "team_id", "enabled", "policy_description", "filter", "time_restriction",
    "auto_close_action", "auto_restart_action", "de_duplication_action",
    "delay_action", "suppress",
}


class PolicyValidationError(ValueError):
    """Raised when a notification policy configuration is invalid."""


def parse_import_id(import_id: str) -> tuple[str, str]:
    """Split an import id of the form team_id/notification_policy_id."""
    parts = import_id.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise PolicyValidationError(
            f'Unexpected format of ID ("{import_id}"), '
            "expected team_id/notification_policy_id"
        )
    return parts[0], parts[1]


def _require(block: Mapping[str, Any], key: str, where: str) -> Any:
    if block.get(key) is None:
        raise PolicyValidationError(f'"{key}" is required in {where}')
    return block[key]


def _check_keys(block: Mapping[str, Any], allowed: set[str], where: str) -> None:
    unknown = set(block) - allowed
    if unknown:
        raise PolicyValidationError(f"unsupported arguments in {where}: {sorted(unknown)}")


def _one_of(key: str, value: Any, allowed: tuple[str, ...]) -> Any:
    if value not in allowed:
        raise PolicyValidationError(
            f"expected {key} to be one of [{' '.join(allowed)}], got {value}"
        )
    return value


def _length_between(key: str, value: str, low: int, high: int) -> str:
    if not low <= len(value) <= high:
        raise PolicyValidationError(
            f"expected length of {key} to be in the range ({low} - {high}), got {value}"
        )
    return value


def _int_between(key: str, value: int, low: int, high: int) -> int:
    if not low <= value <= high:
        raise PolicyValidationError(
            f"expected {key} to be in the range ({low} - {high}), got {value}"
        )
    return value


def _blocks(config: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    return list(config.get(key) or ())


def _duration_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"time_unit", "time_amount"}, "duration")
    unit = block.get("time_unit")
    return {
        "time_unit": _one_of("time_unit", "minutes" if unit is None else unit, TIME_UNITS),
        "time_amount": _require(block, "time_amount", "duration"),
    }


def _condition_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(
        block, {"field", "operation", "key", "not", "expected_value", "order"}, "condition"
    )
    return {
        "field": _one_of("field", _require(block, "field", "condition"), CONDITION_FIELDS),
        "operation": _one_of(
            "operation", _require(block, "operation", "condition"), CONDITION_OPERATIONS
        ),
        "key": block.get("key") or "",
        "not": bool(block.get("not", False)),
        "expected_value": block.get("expected_value") or "",
        "order": block.get("order") or 0,
    }


def _filter_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"type", "conditions"}, "filter")
    kind = block.get("type")
    return {
        "type": _one_of("type", "match-all" if kind is None else kind, FILTER_TYPES),
        "conditions": [_condition_block(c) for c in block.get("conditions") or ()],
    }


_HOURS = ("start_hour", "start_min", "end_hour", "end_min")


def _time_restriction_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"type", "restrictions", "restriction"}, "time_restriction")
    restrictions = []
    for item in block.get("restrictions") or ():
        _check_keys(item, {"start_day", "end_day", *_HOURS}, "restrictions")
        restrictions.append(
            {key: _require(item, key, "restrictions") for key in ("start_day", "end_day", *_HOURS)}
        )
    restriction = []
    for item in block.get("restriction") or ():
        _check_keys(item, set(_HOURS), "restriction")
        restriction.append({key: _require(item, key, "restriction") for key in _HOURS})
    return {
        "type": _one_of(
            "type", _require(block, "type", "time_restriction"), TIME_RESTRICTION_TYPES
        ),
        "restrictions": restrictions,
        "restriction": restriction,
    }


def _auto_close_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"duration"}, "auto_close_action")
    return {
        "duration": [
            _duration_block(d) for d in _require(block, "duration", "auto_close_action")
        ]
    }


def _auto_restart_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"duration", "max_repeat_count"}, "auto_restart_action")
    return {
        "duration": [
            _duration_block(d) for d in _require(block, "duration", "auto_restart_action")
        ],
        "max_repeat_count": _require(block, "max_repeat_count", "auto_restart_action"),
    }


def _de_duplication_block(block: Mapping[str, Any]) -> dict[str, Any]:
    where = "de_duplication_action"
    _check_keys(block, {"de_duplication_action_type", "count", "duration"}, where)
    return {
        "de_duplication_action_type": _one_of(
            "de_duplication_action_type",
            _require(block, "de_duplication_action_type", where),
            DE_DUPLICATION_TYPES,
        ),
        "count": _require(block, "count", where),
        "duration": [_duration_block(d) for d in block.get("duration") or ()],
    }


def _delay_block(block: Mapping[str, Any]) -> dict[str, Any]:
    where = "delay_action"
    _check_keys(block, {"delay_option", "until_minute", "until_hour", "duration"}, where)
    until_minute = block.get("until_minute")
    until_hour = block.get("until_hour")
    return {
        "delay_option": _one_of(
            "delay_option", _require(block, "delay_option", where), DELAY_OPTIONS
        ),
        "until_minute": 0 if until_minute is None
        else _int_between("until_minute", until_minute, 1, 59),
        "until_hour": 0 if until_hour is None
        else _int_between("until_hour", until_hour, 1, 23),
        "duration": [_duration_block(d) for d in block.get("duration") or ()],
    }


def validate_policy(config: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a policy configuration and return it with defaults filled in."""
    _check_keys(config, _TOP_LEVEL_KEYS, "notification policy")
    name = _length_between("name", _require(config, "name", "notification policy"), 1, 512)
    team_id = _require(config, "team_id", "notification policy")
    description = config.get("policy_description")
    if description is not None:
        _length_between("policy_description", description, 1, 512)
    filters = _require(config, "filter", "notification policy")

    delay_action = [_delay_block(b) for b in _blocks(config, "delay_action")]
    if delay_action and config.get("suppress") is not None:
        raise PolicyValidationError('"delay_action": conflicts with suppress')

    return {
        "name": name,
        "team_id": team_id,
        "enabled": bool(config.get("enabled", True)),
        "policy_description": description or "",
        "filter": [_filter_block(b) for b in filters],
        "time_restriction": [
            _time_restriction_block(b) for b in _blocks(config, "time_restriction")
        ],
        "auto_close_action": [_auto_close_block(b) for b in _blocks(config, "auto_close_action")],
        "auto_restart_action": [
            _auto_restart_block(b) for b in _blocks(config, "auto_restart_action")
        ],
        "de_duplication_action": [
            _de_duplication_block(b) for b in _blocks(config, "de_duplication_action")
        ],
        "delay_action": delay_action,
        "suppress": bool(config.get("suppress") or False),
    }


def expand_duration(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn duration blocks into an API duration; the last block wins."""
    duration: dict[str, Any] = {"timeAmount": 0, "timeUnit": ""}
    for item in items or ():
        duration = {"timeAmount": item["time_amount"], "timeUnit": item["time_unit"]}
    return duration


def expand_auto_close_action(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn auto-close blocks into an API auto-close action."""
    action: dict[str, Any] = {}
    for item in items or ():
        action["duration"] = expand_duration(item["duration"])
    return action


def expand_auto_restart_action(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn auto-restart blocks into an API auto-restart action."""
    action: dict[str, Any] = {}
    for item in items or ():
        action["duration"] = expand_duration(item["duration"])
        action["maxRepeatCount"] = item["max_repeat_count"]
    return action


def expand_de_duplication_action(
    items: Iterable[Mapping[str, Any]] | None,
) -> dict[str, Any]:
    """Turn de-duplication blocks into an API de-duplication action."""
    action: dict[str, Any] = {}
    for item in items or ():
        action["deDuplicationActionType"] = item["de_duplication_action_type"]
        action["count"] = item["count"]
        if item.get("duration"):
            action["duration"] = expand_duration(item["duration"])
    return action


def expand_delay_action(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn delay blocks into an API delay action."""
    action: dict[str, Any] = {}
    for item in items or ():
        action["delayOption"] = item["delay_option"]
        action["untilMinute"] = item.get("until_minute") or 0
        action["untilHour"] = item.get("until_hour") or 0
        if item.get("duration"):
            action["duration"] = expand_duration(item["duration"])
    return action


def expand_filter_conditions(items: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Turn condition blocks into API conditions."""
    return [
        {
            "field": item["field"],
            "operation": item["operation"],
            "key": item["key"],
            "not": item["not"],
            "expectedValue": item["expected_value"],
            "order": item["order"],
        }
        for item in items or ()
    ]


def expand_filter(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn filter blocks into an API filter; the last block wins."""
    result: dict[str, Any] = {}
    for item in items or ():
        result = {
            "conditionMatchType": item["type"],
            "conditions": expand_filter_conditions(item["conditions"]),
        }
    return result


def _hours(item: Mapping[str, Any]) -> dict[str, int]:
    return {
        "startHour": item["start_hour"],
        "startMin": item["start_min"],
        "endHour": item["end_hour"],
        "endMin": item["end_min"],
    }


def expand_time_restriction(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn time restriction blocks into an API time restriction."""
    result: dict[str, Any] = {}
    for item in items or ():
        result = {"type": item["type"]}
        restrictions = item.get("restrictions") or []
        if restrictions:
            result["restrictionList"] = [
                {"startDay": r["start_day"], "endDay": r["end_day"], **_hours(r)}
                for r in restrictions
            ]
        else:
            restriction: dict[str, Any] = {}
            for r in item.get("restriction") or ():
                restriction = _hours(r)
            result["restriction"] = restriction
    return result


def expand_main_fields(config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the main fields of a policy request from a validated configuration."""
    fields: dict[str, Any] = {
        "name": config["name"],
        "enabled": config["enabled"],
        "policyDescription": config["policy_description"],
        "teamId": config["team_id"],
    }
    if config.get("filter"):
        fields["filter"] = expand_filter(config["filter"])
    if config.get("time_restriction"):
        fields["timeRestriction"] = expand_time_restriction(config["time_restriction"])
    return fields


def _request_body(config: Mapping[str, Any]) -> dict[str, Any]:
    policy = validate_policy(config)
    request: dict[str, Any] = {
        "mainFields": expand_main_fields(policy),
        "suppress": policy["suppress"],
    }
    if policy["auto_close_action"]:
        request["autoCloseAction"] = expand_auto_close_action(policy["auto_close_action"])
    if policy["auto_restart_action"]:
        request["autoRestartAction"] = expand_auto_restart_action(policy["auto_restart_action"])
    if policy["de_duplication_action"]:
        request["deDuplicationAction"] = expand_de_duplication_action(
            policy["de_duplication_action"]
        )
    if policy["delay_action"]:
        request["delayAction"] = expand_delay_action(policy["delay_action"])
    return request


def build_create_request(config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the request that creates a notification policy."""
    return _request_body(config)


def build_update_request(policy_id: str, config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the request that updates a notification policy by its id."""
    return {"id": policy_id, **_request_body(config)}


def build_delete_request(policy_id: str, team_id: str) -> dict[str, Any]:
    """Build the request that deletes a notification policy of a team."""
    return {"id": policy_id, "teamId": team_id, "type": "notification"}