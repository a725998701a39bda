"""Validation and request building for on-call schedules."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/New_York"

_NAME_PATTERN = re.compile(r"[a-zA-Z 0-9_-]+")


def _load_zone(name: str) -> tzinfo | None:
    if name in ("", "UTC"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def check_timezone_difference(key: str, old: str, new: str) -> bool:
    """Return True when both time zones currently show the same wall-clock time."""
    old_zone = _load_zone(old)
    if old_zone is None:
        return False
    new_zone = _load_zone(new)
    if new_zone is None:
        return False
    now = datetime.now(timezone.utc).replace(microsecond=0)
    old_wall = now.astimezone(old_zone).replace(tzinfo=None)
    new_wall = now.astimezone(new_zone).replace(tzinfo=None)
    return old_wall == new_wall


def validate_name(value: str, key: str = "name") -> str:
    """Return the schedule name, raising ValueError when it is not allowed."""
    errors = []
    if not _NAME_PATTERN.fullmatch(value):
        errors.append(
            f'only alpha numeric characters and underscores are allowed in "{key}": "{value}"'
        )
    length = len(value.encode())
    if length >= 100:
        errors.append(f'"{key}" cannot be longer than 100 characters: "{value}" {length}')
    if errors:
        raise ValueError("; ".join(errors))
    return value


def validate_description(value: str, key: str = "description") -> str:
    """Return the schedule description, raising ValueError when it is too long."""
    length = len(value.encode())
    if length >= 10000:
        raise ValueError(
            f'"{key}" cannot be longer than 10000 characters: "{value}" {length}'
        )
    return value


def _schedule_fields(config: Mapping[str, Any]) -> dict[str, Any]:
    name = config.get("name")
    if name is None:
        raise ValueError('"name" is required')
    request: dict[str, Any] = {
        "name": validate_name(name),
        "enabled": bool(config.get("enabled", False)),
        "description": validate_description(config.get("description") or ""),
        "timezone": config.get("timezone") or DEFAULT_TIMEZONE,
    }
    owner_team = config.get("owner_team_id") or ""
    if owner_team:
        request["ownerTeam"] = {"id": owner_team}
    return request


def build_create_request(config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the request that creates a schedule."""
    return _schedule_fields(config)


def build_update_request(schedule_id: str, config: Mapping[str, Any]) -> dict[str, Any]:
    """Build the request that updates a schedule by its id."""
    return {
        "identifierType": "id",
        "identifierValue": schedule_id,
        **_schedule_fields(config),
    }