import pytest

from ogstate.schedule import (
    build_create_request,
    build_update_request,
    check_timezone_difference,
    validate_description,
    validate_name,
)


def test_check_timezone_difference_equal():
    assert check_timezone_difference("", "America/Los_Angeles", "Canada/Pacific") is True


def test_check_timezone_difference_not_equal():
    assert check_timezone_difference("", "America/Los_Angeles", "Europe/Istanbul") is False


def test_check_timezone_difference_unknown_zone():
    assert check_timezone_difference("", "Not/AZone", "Europe/Rome") is False
    assert check_timezone_difference("", "Europe/Rome", "Not/AZone") is False


def test_check_timezone_difference_same_zone():
    assert check_timezone_difference("timezone", "Europe/Rome", "Europe/Rome") is True


def test_validate_name_accepts_valid():
    assert validate_name("genieschedule-abc_1 x", "name") == "genieschedule-abc_1 x"


@pytest.mark.parametrize("value", ["bad.name", "", "a" * 100, "genie/schedule"])
def test_validate_name_rejects(value):
    with pytest.raises(ValueError):
        validate_name(value, "name")


def test_validate_description():
    assert validate_description("schedule test", "description") == "schedule test"
    with pytest.raises(ValueError):
        validate_description("x" * 10000, "description")


def test_build_create_request_basic():
    request = build_create_request(
        {"name": "genieschedule-abc", "description": "schedule test",
         "timezone": "Europe/Rome", "enabled": False}
    )
    assert request == {
        "name": "genieschedule-abc",
        "enabled": False,
        "description": "schedule test",
        "timezone": "Europe/Rome",
    }


def test_build_create_request_defaults_and_owner():
    request = build_create_request({"name": "genieschedule-abc", "owner_team_id": "team-1"})
    assert request["timezone"] == "America/New_York"
    assert request["ownerTeam"] == {"id": "team-1"}
    assert request["description"] == ""


def test_build_update_request():
    request = build_update_request(
        "sched-1", {"name": "genieschedule-abc", "description": "schedule test"}
    )
    assert request["identifierValue"] == "sched-1"
    assert request["identifierType"] == "id"
    assert "ownerTeam" not in request
    assert request["name"] == "genieschedule-abc"


def test_build_create_request_requires_name():
    with pytest.raises(ValueError):
        build_create_request({"description": "schedule test"})