# ogstate

`ogstate` turns declarative OpsGenie configuration blocks into API request
payloads. It also turns API results back into the same block shape, so that
they can be stored and compared as state. Blocks are plain dictionaries and
lists, as they appear in configuration. Optional attributes take the
defaults that the configuration schema gives them. Invalid values raise a
`ValueError` or one of its subclasses, with a message that names the
offending attribute.

## Modules

- `ogstate.integration_action`: `ActionType`, `with_defaults`,
  `validate_filter_type`, `expand_responders`, `expand_filter`,
  `expand_actions`, `build_update_request`, `build_delete_request`.
- `ogstate.integration_action_flatten`: `flatten_filter`,
  `flatten_action_tags`, `flatten_actions`.
- `ogstate.schedule`: `check_timezone_difference`, `validate_name`,
  `validate_description`, `build_create_request`, `build_update_request`.
- `ogstate.notification_policy`: `PolicyValidationError`, `parse_import_id`,
  `validate_policy`, `expand_main_fields`, the `expand_*` helpers for each
  action, filter and time restriction, `build_create_request`,
  `build_update_request`, `build_delete_request`.
- `ogstate.notification_policy_flatten`: `flatten_duration`,
  `flatten_auto_close_action`, `flatten_auto_restart_action`,
  `flatten_de_duplication_action`, `flatten_delay_action`, `flatten_filter`,
  `flatten_filter_conditions`, `flatten_time_restriction`.
- `ogstate.notification_rule`: `RuleValidationError`, `parse_import_id`,
  `validate_rule`, the `expand_*` helpers for notification times, steps,
  repeat, time restriction, schedules and criteria, `build_create_request`,
  `build_update_request`.
- `ogstate.notification_rule_flatten`: `flatten_steps`,
  `flatten_steps_contact`, `flatten_time_restriction`, `flatten_schedules`.
- `ogstate.maintenance`: `MaintenanceError`, `MaintenanceTime`,
  `MaintenanceRule`, `expand_entity`, `expand_rules`, `expand_time`,
  `flatten_time`, `plan_update`, `build_create_request`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Build the request that replaces every action of an integration:

```python
from ogstate.integration_action import build_update_request

request = build_update_request(
    "integration-id",
    close=[{
        "name": "Test close action",
        "filter": [{
            "type": "match-all-conditions",
            "conditions": [
                {"field": "priority", "operation": "equals", "expected_value": "P5"},
            ],
        }],
    }],
)
```

Action kinds that are not given get an empty list.
`build_delete_request("integration-id")` builds the request that clears
every kind.

Build a notification policy request. A `filter` block is required; an empty
block defaults to `match-all`:

```python
from ogstate.notification_policy import build_create_request, parse_import_id

request = build_create_request({
    "name": "geniepolicy",
    "team_id": "team-id",
    "filter": [{}],
    "de_duplication_action": [
        {"de_duplication_action_type": "value-based", "count": 20},
    ],
})

team_id, policy_id = parse_import_id("team-id/policy-id")
```

Import identifiers are of the form `team_id/policy_id` for policies and
`username/rule_id` for rules. `parse_import_id` in the matching module
splits them and raises `PolicyValidationError` or `RuleValidationError`
when the format is wrong.

Build a maintenance window. A rule whose entity is an integration is always
`disabled`:

```python
from ogstate.maintenance import build_create_request, plan_update

request = build_create_request({
    "description": "geniemaintenance",
    "time": [{
        "type": "schedule",
        "start_date": "2019-06-20T17:45:00Z",
        "end_date": "2030-06-20T17:50:00Z",
    }],
    "rules": [{"state": "enabled", "entity": [{"id": "integration-id", "type": "integration"}]}],
})

plan_update("active")   # "change-end-date"
plan_update("planned")  # "update"
plan_update("past")     # raises MaintenanceError
```

Check whether two time zone names currently show the same wall-clock time:

```python
from ogstate.schedule import check_timezone_difference

check_timezone_difference("timezone", "America/Los_Angeles", "Canada/Pacific")  # True
```

## What it does not do

`ogstate` only builds and reads payloads. It has no API client: it sends no
requests and keeps no state of its own. It does not handle custom user
roles.