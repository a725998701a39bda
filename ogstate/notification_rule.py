"""Validation and request building for user notification rules."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ogstate.notification_policy import expand_time_restriction as _expand_restriction

ACTION_TYPES = (
    "create-alert", "acknowledged-alert", "closed-alert", "assigned-alert", "add-note",
    "schedule-start", "schedule-end", "incoming-call-routing",
)
NOTIFICATION_TIMES = ("just-before", "15-minutes-ago", "1-hour-ago", "1-day-ago")
CONTACT_METHODS = ("email", "sms", "voice", "mobile")

_TOP_LEVEL_KEYS = {
    "name", "username", "action_type", "notification_time", "steps", "enabled",
    "order", "repeat", "time_restriction", "schedules", "criteria",
}
_HOURS = ("start_hour", "start_min", "end_hour", "end_min")


class RuleValidationError(ValueError):
    """Raised when a notification rule configuration is invalid."""


def parse_import_id(import_id: str) -> tuple[str, str]:
    """Split an import id of the form username/notification_rule_id."""
    parts = import_id.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise RuleValidationError(
            f'Unexpected format of ID ("{import_id}"), '
            "expected username/notification_rule_id"
        )
    return parts[0], parts[1]


def _require(block: Mapping[str, Any], key: str, where: str) -> Any:
    if block.get(key) is None:
        raise RuleValidationError(f'"{key}" is required in {where}')
    return block[key]


def _check_keys(block: Mapping[str, Any], allowed: set[str], where: str) -> None:
    unknown = set(block) - allowed
    if unknown:
        raise RuleValidationError(f"unsupported arguments in {where}: {sorted(unknown)}")


def _one_of(key: str, value: Any, allowed: tuple[str, ...]) -> Any:
    if value not in allowed:
        raise RuleValidationError(
            f"expected {key} to be one of [{' '.join(allowed)}], got {value}"
        )
    return value


def _contact_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"method", "to"}, "contact")
    return {
        "method": _one_of("method", _require(block, "method", "contact"), CONTACT_METHODS),
        "to": _require(block, "to", "contact"),
    }


def _step_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"enabled", "send_after", "contact"}, "steps")
    enabled = block.get("enabled")
    return {
        "enabled": True if enabled is None else bool(enabled),
        "send_after": block.get("send_after") or 0,
        "contact": [_contact_block(c) for c in _require(block, "contact", "steps")],
    }


def _repeat_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"loop_after", "enabled"}, "repeat")
    enabled = block.get("enabled")
    return {
        "loop_after": _require(block, "loop_after", "repeat"),
        "enabled": True if enabled is None else bool(enabled),
    }


def _time_restriction_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"type", "restrictions", "restriction"}, "time_restriction")
    restrictions = []
    for item in block.get("restrictions") or ():
        keys = ("start_day", "end_day", *_HOURS)
        _check_keys(item, set(keys), "restrictions")
        restrictions.append({key: _require(item, key, "restrictions") for key in keys})
    restriction = []
    for item in block.get("restriction") or ():
        _check_keys(item, set(_HOURS), "restriction")
        restriction.append({key: _require(item, key, "restriction") for key in _HOURS})
    return {
        "type": _require(block, "type", "time_restriction"),
        "restrictions": restrictions,
        "restriction": restriction,
    }


def _schedule_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"type", "name"}, "schedules")
    return {
        "type": _require(block, "type", "schedules"),
        "name": _require(block, "name", "schedules"),
    }


def _condition_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(
        block, {"field", "key", "not", "operation", "expected_value", "order"}, "conditions"
    )
    return {
        "field": _require(block, "field", "conditions"),
        "operation": _require(block, "operation", "conditions"),
        "key": block.get("key") or "",
        "not": bool(block.get("not", False)),
        "expected_value": block.get("expected_value") or "",
        "order": block.get("order") or 0,
    }


def _criteria_block(block: Mapping[str, Any]) -> dict[str, Any]:
    _check_keys(block, {"type", "conditions"}, "criteria")
    return {
        "type": _require(block, "type", "criteria"),
        "conditions": [_condition_block(c) for c in block.get("conditions") or ()],
    }


def _blocks(config: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    return list(config.get(key) or ())


def validate_rule(config: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a rule configuration and return it with defaults filled in."""
    _check_keys(config, _TOP_LEVEL_KEYS, "notification rule")
    name = _require(config, "name", "notification rule")
    if not 1 <= len(name) <= 512:
        raise RuleValidationError(
            f"expected length of name to be in the range (1 - 512), got {name}"
        )
    username = _require(config, "username", "notification rule")
    action_type = _one_of(
        "action_type", _require(config, "action_type", "notification rule"), ACTION_TYPES
    )
    times = [
        _one_of("notification_time", value, NOTIFICATION_TIMES)
        for value in config.get("notification_time") or ()
    ]
    enabled = config.get("enabled")
    return {
        "name": name,
        "username": username,
        "action_type": action_type,
        "notification_time": times,
        "steps": [_step_block(b) for b in _blocks(config, "steps")],
        "enabled": True if enabled is None else bool(enabled),
        "order": config.get("order") or 0,
        "repeat": [_repeat_block(b) for b in _blocks(config, "repeat")],
        "time_restriction": [
            _time_restriction_block(b) for b in _blocks(config, "time_restriction")
        ],
        "schedules": [_schedule_block(b) for b in _blocks(config, "schedules")],
        "criteria": [_criteria_block(b) for b in _blocks(config, "criteria")],
    }


def expand_notification_time(values: Iterable[str] | None) -> list[str]:
    """Return the distinct notification times, keeping their first order."""
    if values is None:
        return []
    return list(dict.fromkeys(str(v) for v in values))


def expand_steps_contact(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn contact blocks into an API contact; the last block wins."""
    contact: dict[str, Any] = {"to": "", "method": ""}
    for item in items or ():
        contact = {"to": item["to"], "method": item["method"]}
    return contact


def expand_steps(items: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Turn step blocks into API notification steps."""
    steps = []
    for item in items or ():
        step: dict[str, Any] = {
            "enabled": item["enabled"],
            "contact": expand_steps_contact(item["contact"]),
        }
        send_after = item.get("send_after") or 0
        if send_after > 0:
            step["sendAfter"] = {"timeUnit": "minute", "timeAmount": send_after}
        steps.append(step)
    return steps


def expand_repeat(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn repeat blocks into an API repeat; the last block wins."""
    repeat: dict[str, Any] = {"loopAfter": 0}
    for item in items or ():
        repeat = {"loopAfter": item["loop_after"], "enabled": item["enabled"]}
    return repeat


def expand_time_restriction(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn time restriction blocks into an API time restriction."""
    return _expand_restriction(items)


def expand_schedules(items: Iterable[Mapping[str, Any]] | None) -> list[dict[str, str]]:
    """Turn schedule blocks into API schedules."""
    return [{"type": item["type"], "name": item["name"]} for item in items or ()]


def expand_criteria_conditions(
    items: Iterable[Mapping[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Turn condition blocks into API conditions; an empty key is left out."""
    conditions = []
    for item in items or ():
        condition: dict[str, Any] = {
            "field": item["field"],
            "not": item["not"],
            "operation": item["operation"],
            "expectedValue": item["expected_value"],
        }
        if item.get("key"):
            condition["key"] = item["key"]
        condition["order"] = item["order"]
        conditions.append(condition)
    return conditions


def expand_criteria(items: Iterable[Mapping[str, Any]] | None) -> dict[str, Any]:
    """Turn criteria blocks into API criteria; the last block wins."""
    criteria: dict[str, Any] = {"type": "", "conditions": []}
    for item in items or ():
        criteria = {
            "type": item["type"],
            "conditions": expand_criteria_conditions(item["conditions"]),
        }
    return criteria


def _optional_parts(rule: Mapping[str, Any]) -> dict[str, Any]:
    parts: dict[str, Any] = {}
    if rule["repeat"]:
        parts["repeat"] = expand_repeat(rule["repeat"])
    if rule["criteria"]:
        parts["criteria"] = expand_criteria(rule["criteria"])
    if rule["schedules"]:
        parts["schedules"] = expand_schedules(rule["schedules"])
    if rule["steps"]:
        parts["steps"] = expand_steps(rule["steps"])
    if rule["time_restriction"]:
        parts["timeRestriction"] = expand_time_restriction(rule["time_restriction"])
    return parts


def build_create_request(config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the request that creates a notification rule for a user."""
    rule = validate_rule(config)
    return {
        "userIdentifier": rule["username"],
        "name": rule["name"],
        "actionType": rule["action_type"],
        "notificationTime": expand_notification_time(rule["notification_time"]),
        "enabled": rule["enabled"],
        "order": rule["order"],
        **_optional_parts(rule),
    }


def build_update_request(rule_id: str, config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the request that updates a notification rule by its id."""
    rule = validate_rule(config)
    return {
        "userIdentifier": rule["username"],
        "ruleId": rule_id,
        "notificationTime": expand_notification_time(rule["notification_time"]),
        "enabled": rule["enabled"],
        "order": rule["order"],
        **_optional_parts(rule),
    }