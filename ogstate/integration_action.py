"""Expansion of integration action blocks into integration-actions API requests."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

FILTER_TYPES = ("match-all", "match-any-condition", "match-all-conditions")


class ActionType(str, Enum):
    """Kinds of integration actions, valued as the API names them."""

    CREATE = "create"
    CLOSE = "close"
    ACKNOWLEDGE = "acknowledge"
    ADD_NOTE = "addNote"
    IGNORE = "ignore"

    @classmethod
    def from_block(cls, kind: "ActionType | str") -> "ActionType":
        """Resolve an action type from its API value or its block name."""
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            pass
        if kind == "add_note":
            return cls.ADD_NOTE
        raise ValueError(f"unknown integration action kind: {kind!r}")


def _message_defaults() -> dict[str, Any]:
    return {"user": "{{user}}", "note": "{{note}}", "alias": "{{alias}}"}


def _create_defaults() -> dict[str, Any]:
    return {
        "priority": "",
        "custom_priority": "",
        "source": "{{source}}",
        "message": "{{message}}",
        "description": "{{description}}",
        "entity": "{{entity}}",
        "append_attachments": True,
        "ignore_alert_actions_from_payload": False,
        "ignore_responders_from_payload": False,
        "ignore_teams_from_payload": False,
        "ignore_tags_from_payload": False,
        "ignore_extra_properties_from_payload": False,
        "alert_actions": [],
        "responders": [],
        "tags": [],
        "extra_properties": {},
    }


def validate_filter_type(value: str) -> str:
    """Return the filter type, or raise ValueError if it is not a known one."""
    if value not in FILTER_TYPES:
        raise ValueError(
            f"expected type to be one of [{' '.join(FILTER_TYPES)}], got {value}"
        )
    return value


def _require(block: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in block or block[key] is None:
        raise ValueError(f'"{key}" is required in {where}')
    return block[key]


def _condition_with_defaults(condition: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {"field", "key", "not", "operation", "expected_value", "order"}
    unknown = set(condition) - allowed
    if unknown:
        raise ValueError(f"unsupported condition arguments: {sorted(unknown)}")
    return {
        "field": _require(condition, "field", "condition"),
        "operation": _require(condition, "operation", "condition"),
        "key": condition.get("key") or "",
        "not": bool(condition.get("not", False)),
        "expected_value": condition.get("expected_value") or "",
        "order": condition.get("order") or 0,
    }


def _filter_with_defaults(action_filter: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(action_filter) - {"type", "conditions"}
    if unknown:
        raise ValueError(f"unsupported filter arguments: {sorted(unknown)}")
    return {
        "type": validate_filter_type(_require(action_filter, "type", "filter")),
        "conditions": [
            _condition_with_defaults(c) for c in action_filter.get("conditions") or ()
        ],
    }


def with_defaults(kind: "ActionType | str", block: Mapping[str, Any]) -> dict[str, Any]:
    """Fill an action block with the defaults of its kind, validating it."""
    action_type = ActionType.from_block(kind)
    result: dict[str, Any] = {"type": action_type.value, "order": 1, "filter": []}
    if action_type is not ActionType.IGNORE:
        result.update(_message_defaults())
    if action_type is ActionType.CREATE:
        result.update(_create_defaults())

    allowed = set(result) | {"name"}
    unknown = set(block) - allowed
    if unknown:
        raise ValueError(
            f"unsupported arguments for {action_type.value} action: {sorted(unknown)}"
        )
    _require(block, "name", f"{action_type.value} action")

    for key, value in block.items():
        if key == "filter":
            result["filter"] = [_filter_with_defaults(f) for f in value or ()]
        elif value is not None:
            result[key] = value
    return result


def expand_responders(items: Iterable[Mapping[str, Any]] | None) -> list[dict[str, str]]:
    """Turn responder blocks into API responders."""
    if items is None:
        return []
    return [{"type": item["type"], "id": item["id"]} for item in items]


def _expand_conditions(items: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    conditions = []
    for item in items:
        condition = {
            "field": item["field"],
            "operation": item["operation"],
            "not": item["not"],
            "expectedValue": item["expected_value"],
            "order": item["order"],
        }
        if item["key"]:
            condition["key"] = item["key"]
        conditions.append(condition)
    return conditions


def expand_filter(items: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Turn filter blocks into an API filter; the last block wins."""
    result: dict[str, Any] = {"conditionMatchType": "", "conditions": []}
    for item in items:
        result = {
            "conditionMatchType": item["type"],
            "conditions": _expand_conditions(item["conditions"]),
        }
    return result


def expand_actions(items: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Turn defaulted action blocks into API integration actions."""
    if items is None:
        return []
    actions = []
    for item in items:
        action: dict[str, Any] = {
            "type": item["type"],
            "name": item["name"],
            "order": item["order"],
        }
        if action["type"] != ActionType.IGNORE.value:
            action["alias"] = item["alias"]
            action["user"] = item["user"]
            action["note"] = item["note"]
        if item.get("priority") is not None:
            action["priority"] = item["priority"]
        if item.get("custom_priority") is not None:
            action["customPriority"] = item["custom_priority"]
        action["filter"] = expand_filter(item["filter"])

        if action["type"] == ActionType.CREATE.value:
            action["source"] = item["source"]
            action["message"] = item["message"]
            action["description"] = item["description"]
            action["entity"] = item["entity"]
            action["alertActions"] = [str(a) for a in item["alert_actions"]]
            action["tags"] = list(dict.fromkeys(str(t) for t in item["tags"]))
            if item.get("extra_properties") is not None:
                action["extraProperties"] = {
                    str(k): str(v) for k, v in item["extra_properties"].items()
                }
            action["appendAttachments"] = item["append_attachments"]
            action["ignoreTagsFromPayload"] = item["ignore_tags_from_payload"]
            action["ignoreRespondersFromPayload"] = item["ignore_responders_from_payload"]
            action["ignoreAlertActionsFromPayload"] = item[
                "ignore_alert_actions_from_payload"
            ]
            action["ignoreExtraPropertiesFromPayload"] = item[
                "ignore_extra_properties_from_payload"
            ]
            action["responders"] = expand_responders(item["responders"])
        actions.append(action)
    return actions


def build_update_request(
    integration_id: str,
    create: Iterable[Mapping[str, Any]] | None = None,
    close: Iterable[Mapping[str, Any]] | None = None,
    acknowledge: Iterable[Mapping[str, Any]] | None = None,
    add_note: Iterable[Mapping[str, Any]] | None = None,
    ignore: Iterable[Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build the request that replaces every action of an integration."""
    blocks = {
        ActionType.CREATE: create,
        ActionType.CLOSE: close,
        ActionType.ACKNOWLEDGE: acknowledge,
        ActionType.ADD_NOTE: add_note,
        ActionType.IGNORE: ignore,
    }
    request: dict[str, Any] = {"id": integration_id}
    for kind, items in blocks.items():
        request[kind.value] = expand_actions(
            [with_defaults(kind, block) for block in items or ()]
        )
    return request


def build_delete_request(integration_id: str) -> dict[str, Any]:
    """Build the request that clears every action of an integration."""
    request: dict[str, Any] = {"id": integration_id}
    for kind in ActionType:
        request[kind.value] = []
    return request