"""Flattening of integration-actions API responses back into action blocks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ogstate.integration_action import ActionType


def flatten_filter(action_filter: Mapping[str, Any] | None) -> list[dict[str, Any]]:
    """Turn an API filter into a single-element list of filter blocks."""
    action_filter = action_filter or {}
    conditions = []
    for condition in action_filter.get("conditions") or ():
        block: dict[str, Any] = {"order": condition.get("order")}
        if condition.get("key"):
            block["key"] = condition["key"]
        block["expected_value"] = condition.get("expectedValue", "")
        block["operation"] = condition.get("operation")
        block["field"] = condition.get("field")
        block["not"] = condition.get("not")
        conditions.append(block)
    return [
        {
            "type": action_filter.get("conditionMatchType", ""),
            "conditions": conditions,
        }
    ]


def flatten_action_tags(tags: Iterable[Any] | None) -> list[str]:
    """Return the tags of an action as a list of strings."""
    if tags is None:
        return []
    return [str(tag) for tag in tags]


def flatten_actions(actions: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Turn API integration actions into action blocks."""
    result = []
    for action in actions or ():
        action_type = action.get("type")
        block: dict[str, Any] = {"type": action_type, "name": action.get("name")}
        if action_type != ActionType.IGNORE.value:
            block["user"] = action.get("user", "")
            block["alias"] = action.get("alias", "")
            block["note"] = action.get("note", "")
        block["order"] = action.get("order")
        block["filter"] = flatten_filter(action.get("filter"))
        if action_type == ActionType.CREATE.value:
            block["source"] = action.get("source", "")
            block["priority"] = action.get("priority", "")
            block["custom_priority"] = action.get("customPriority", "")
            block["message"] = action.get("message", "")
            block["description"] = action.get("description", "")
            block["entity"] = action.get("entity", "")
            block["append_attachments"] = action.get("appendAttachments")
            block["alert_actions"] = action.get("alertActions")
            block["ignore_alert_actions_from_payload"] = action.get(
                "ignoreAlertActionsFromPayload"
            )
            block["ignore_responders_from_payload"] = action.get(
                "ignoreRespondersFromPayload"
            )
            block["ignore_tags_from_payload"] = action.get("ignoreTagsFromPayload")
            block["ignore_extra_properties_from_payload"] = action.get(
                "ignoreExtraPropertiesFromPayload"
            )
            block["responders"] = [
                {"type": str(responder["type"]), "id": responder["id"]}
                for responder in action.get("responders") or ()
            ]
            block["tags"] = action.get("tags")
            block["extra_properties"] = action.get("extraProperties")
        result.append(block)
    return result