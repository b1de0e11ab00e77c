import pytest

from planhaus.prefill.completion import get_intake_completion, is_intake_complete


def test_complete_intake_is_fully_complete(complete_intake):
    assert get_intake_completion(complete_intake) == 100
    assert is_intake_complete(complete_intake) is True


@pytest.mark.parametrize("intake, expected", [
    ({}, 0),
    ({"step1": {"pronouns": "they/them"}}, 14),
    ({"step1": {"pronouns": "they/them"}, "step2": {"flexibilityWindow": None}}, 14),
    ({"step1": {"pronouns": "they/them"}, "step2": {"date": "2025-06-15"},
      "step3": {"totalBudget": 1000}, "step7": {"consent": False}}, 57),
])
def test_completion_counts_touched_steps(intake, expected):
    assert get_intake_completion(intake) == expected


def test_missing_consent_is_not_complete(complete_intake):
    complete_intake["step7"]["consent"] = False
    assert is_intake_complete(complete_intake) is False
    assert get_intake_completion(complete_intake) == 100


@pytest.mark.parametrize("path", [
    ("step1",),
    ("step2", "workingTitle"),
    ("step2", "date"),
    ("step2", "location"),
    ("step3",),
])
def test_required_fields_for_completeness(complete_intake, path):
    container = complete_intake
    for key in path[:-1]:
        container = container[key]
    del container[path[-1]]
    assert is_intake_complete(complete_intake) is False
