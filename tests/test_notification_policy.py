import pytest

from ogstate.notification_policy import (
    PolicyValidationError,
    build_create_request,
    build_delete_request,
    build_update_request,
    expand_auto_close_action,
    expand_auto_restart_action,
    expand_de_duplication_action,
    expand_delay_action,
    expand_duration,
    expand_filter,
    expand_filter_conditions,
    expand_main_fields,
    expand_time_restriction,
    parse_import_id,
    validate_policy,
)


def basic_config():
    return {
        "name": "geniepolicy-abcdef",
        "team_id": "team-1",
        "policy_description": "Perfect notification policy for the team.",
        "delay_action": [
            {"delay_option": "next-time", "until_minute": 30, "until_hour": 7}
        ],
        "filter": [{}],
        "time_restriction": [
            {
                "type": "weekday-and-time-of-day",
                "restrictions": [
                    {"end_day": "monday", "end_hour": 7, "end_min": 0,
                     "start_day": "sunday", "start_hour": 21, "start_min": 0},
                    {"end_day": "tuesday", "end_hour": 7, "end_min": 0,
                     "start_day": "monday", "start_hour": 22, "start_min": 0},
                ],
            }
        ],
    }


def dedup_config():
    return {
        "name": "geniepolicy-abcdef",
        "team_id": "team-1",
        "policy_description": "Perfect notification policy for the team.",
        "de_duplication_action": [
            {"count": 20, "de_duplication_action_type": "value-based"}
        ],
        "filter": [{}],
    }


def test_parse_import_id():
    assert parse_import_id("team-1/policy-2") == ("team-1", "policy-2")


@pytest.mark.parametrize("bad", ["team-1", "/policy", "team/", "a/b/c", ""])
def test_parse_import_id_rejects_bad_format(bad):
    with pytest.raises(PolicyValidationError, match="expected team_id/notification_policy_id"):
        parse_import_id(bad)


def test_basic_policy_request():
    request = build_create_request(basic_config())
    assert request["suppress"] is False
    assert request["delayAction"] == {
        "delayOption": "next-time",
        "untilMinute": 30,
        "untilHour": 7,
    }
    main = request["mainFields"]
    assert main["name"] == "geniepolicy-abcdef"
    assert main["teamId"] == "team-1"
    assert main["enabled"] is True
    assert main["filter"] == {"conditionMatchType": "match-all", "conditions": []}
    assert main["timeRestriction"] == {
        "type": "weekday-and-time-of-day",
        "restrictionList": [
            {"startDay": "sunday", "endDay": "monday", "startHour": 21,
             "startMin": 0, "endHour": 7, "endMin": 0},
            {"startDay": "monday", "endDay": "tuesday", "startHour": 22,
             "startMin": 0, "endHour": 7, "endMin": 0},
        ],
    }
    assert "autoCloseAction" not in request
    assert "deDuplicationAction" not in request


def test_de_duplication_policy_request():
    request = build_create_request(dedup_config())
    assert request["deDuplicationAction"] == {
        "deDuplicationActionType": "value-based",
        "count": 20,
    }
    assert "delayAction" not in request
    assert "timeRestriction" not in request["mainFields"]


def test_update_request_carries_id():
    request = build_update_request("policy-9", dedup_config())
    assert request["id"] == "policy-9"
    assert request["mainFields"]["policyDescription"] == (
        "Perfect notification policy for the team."
    )


def test_delete_request():
    assert build_delete_request("p", "t") == {"id": "p", "teamId": "t", "type": "notification"}


def test_validate_policy_defaults():
    policy = validate_policy({"name": "n", "team_id": "t", "filter": [{}]})
    assert policy["enabled"] is True
    assert policy["suppress"] is False
    assert policy["policy_description"] == ""
    assert policy["filter"] == [{"type": "match-all", "conditions": []}]


def test_duration_defaults_to_minutes():
    policy = validate_policy({
        "name": "n", "team_id": "t", "filter": [{}],
        "auto_close_action": [{"duration": [{"time_amount": 5}]}],
    })
    assert expand_auto_close_action(policy["auto_close_action"]) == {
        "duration": {"timeAmount": 5, "timeUnit": "minutes"}
    }


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"name": ""}, "expected length of name"),
        ({"name": "x" * 513}, "expected length of name"),
        ({"policy_description": ""}, "expected length of policy_description"),
        ({"filter": [{"type": "nope"}]}, "expected type to be one of"),
        ({"filter": [{"conditions": [{"field": "bogus", "operation": "equals"}]}]},
         "expected field to be one of"),
        ({"filter": [{"conditions": [{"field": "message", "operation": "bogus"}]}]},
         "expected operation to be one of"),
        ({"delay_action": [{"delay_option": "next-time", "until_hour": 0}]},
         r"expected until_hour to be in the range \(1 - 23\)"),
        ({"delay_action": [{"delay_option": "next-time", "until_minute": 60}]},
         r"expected until_minute to be in the range \(1 - 59\)"),
        ({"delay_action": [{"delay_option": "later"}]}, "expected delay_option"),
        ({"auto_close_action": [{"duration": [{"time_amount": 1, "time_unit": "weeks"}]}]},
         "expected time_unit"),
        ({"de_duplication_action": [{"count": 1, "de_duplication_action_type": "x"}]},
         "expected de_duplication_action_type"),
        ({"time_restriction": [{"type": "always"}]}, "expected type to be one of"),
        ({"unknown": 1}, "unsupported arguments"),
    ],
)
def test_validate_policy_errors(changes, message):
    config = {"name": "n", "team_id": "t", "filter": [{}], **changes}
    with pytest.raises(PolicyValidationError, match=message):
        validate_policy(config)


@pytest.mark.parametrize("missing", ["name", "team_id", "filter"])
def test_required_fields(missing):
    config = {"name": "n", "team_id": "t", "filter": [{}]}
    del config[missing]
    with pytest.raises(PolicyValidationError, match=missing):
        validate_policy(config)


def test_delay_action_conflicts_with_suppress():
    config = basic_config()
    config["suppress"] = True
    with pytest.raises(PolicyValidationError, match="conflicts with suppress"):
        build_create_request(config)


def test_suppress_alone_is_passed():
    config = dedup_config()
    config["suppress"] = True
    assert build_create_request(config)["suppress"] is True


def test_expand_duration_last_wins_and_empty():
    assert expand_duration(None) == {"timeAmount": 0, "timeUnit": ""}
    items = [{"time_amount": 1, "time_unit": "hours"}, {"time_amount": 3, "time_unit": "days"}]
    assert expand_duration(items) == {"timeAmount": 3, "timeUnit": "days"}


def test_expand_auto_restart_action():
    items = [{"duration": [{"time_amount": 2, "time_unit": "hours"}], "max_repeat_count": 4}]
    assert expand_auto_restart_action(items) == {
        "duration": {"timeAmount": 2, "timeUnit": "hours"},
        "maxRepeatCount": 4,
    }
    assert expand_auto_restart_action(None) == {}


def test_expand_de_duplication_with_duration():
    items = [{"de_duplication_action_type": "frequency-based", "count": 3,
              "duration": [{"time_amount": 10, "time_unit": "minutes"}]}]
    assert expand_de_duplication_action(items) == {
        "deDuplicationActionType": "frequency-based",
        "count": 3,
        "duration": {"timeAmount": 10, "timeUnit": "minutes"},
    }


def test_expand_delay_action_unset_hours_are_zero():
    result = expand_delay_action([{"delay_option": "for-duration",
                                   "duration": [{"time_amount": 1, "time_unit": "days"}]}])
    assert result == {
        "delayOption": "for-duration",
        "untilMinute": 0,
        "untilHour": 0,
        "duration": {"timeAmount": 1, "timeUnit": "days"},
    }


def test_expand_filter_conditions():
    items = [{"field": "message", "operation": "contains", "key": "", "not": True,
              "expected_value": "boom", "order": 2}]
    assert expand_filter_conditions(items) == [
        {"field": "message", "operation": "contains", "key": "", "not": True,
         "expectedValue": "boom", "order": 2}
    ]
    assert expand_filter([{"type": "match-any-condition", "conditions": items}])[
        "conditionMatchType"
    ] == "match-any-condition"


def test_expand_time_restriction_single_restriction():
    items = [{"type": "time-of-day", "restrictions": [],
              "restriction": [{"start_hour": 3, "start_min": 15, "end_hour": 5, "end_min": 30}]}]
    assert expand_time_restriction(items) == {
        "type": "time-of-day",
        "restriction": {"startHour": 3, "startMin": 15, "endHour": 5, "endMin": 30},
    }


def test_expand_main_fields_without_optional_blocks():
    policy = validate_policy({"name": "n", "team_id": "t", "filter": [], "enabled": False})
    assert expand_main_fields(policy) == {
        "name": "n", "enabled": False, "policyDescription": "", "teamId": "t",
    }