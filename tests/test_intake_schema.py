import pytest

from planhaus.intake_schema import (
    IntakeDraft,
    calculate_budget_remaining,
    make_partial_model,
    BudgetStep,
    validate_intake,
    validate_step,
)


def _codes(result):
    return {issue.code for issue in result.errors}


def _paths(result):
    return {issue.path for issue in result.errors}


def test_complete_intake_is_valid(complete_intake):
    result = validate_intake(complete_intake)
    assert result.success
    assert result.errors == []
    assert result.data["step2"]["location"]["city"] == "Austin"
    assert result.data["step5"]["music"]["bandOrDJ"] == "band"


@pytest.mark.parametrize("percents", [[45, 30, 10, 8, 7], [45, 30, 10, 8, 6.5]])
def test_budget_step_accepts_percentages_within_one_point_of_hundred(complete_intake, percents):
    step3 = complete_intake["step3"]
    for category, percent in zip(step3["categories"], percents):
        category["percent"] = percent
    assert validate_step("step3", step3).success


@pytest.mark.parametrize("percents", [[40, 20, 10, 8, 6], [50, 35, 10, 12, 9]])
def test_budget_step_rejects_percentages_far_from_hundred(complete_intake, percents):
    step3 = complete_intake["step3"]
    for category, percent in zip(step3["categories"], percents):
        category["percent"] = percent

    result = validate_step("step3", step3)

    assert not result.success
    assert "categories" in _paths(result)
    assert "budget_percent_sum" in _codes(result)


def test_budget_sum_error_is_reported_under_step3_in_full_intake(complete_intake):
    complete_intake["step3"]["categories"][0]["percent"] = 29
    result = validate_intake(complete_intake)
    assert not result.success
    assert "step3.categories" in _paths(result)


def test_consent_must_be_given(complete_intake):
    complete_intake["step7"]["consent"] = False
    result = validate_intake(complete_intake)
    assert not result.success
    assert [issue.code for issue in result.errors] == ["consent_required"]
    assert result.errors[0].path == "step7.consent"


def test_couple_phones_must_be_e164(complete_intake):
    complete_intake["step1"]["phones"] = ["(415) 555-0123"]
    result = validate_step("step1", complete_intake["step1"])
    assert not result.success
    assert "phones.0" in _paths(result)


def test_couple_names_need_exactly_two_entries(complete_intake):
    complete_intake["step1"]["couple"]["firstName"] = ["Alex"]
    result = validate_step("step1", complete_intake["step1"])
    assert not result.success
    assert "couple.firstName" in _paths(result)


def test_invalid_email_and_hex_colour_are_rejected(complete_intake):
    complete_intake["step1"]["emails"] = ["not-an-email"]
    complete_intake["step2"]["style"]["colorPalette"] = [{"name": "Sage", "hex": "9CAF88"}]
    result = validate_intake(complete_intake)
    assert {"step1.emails.0", "step2.style.colorPalette.0.hex"} <= _paths(result)


def test_vendor_search_radius_defaults_and_bounds(complete_intake):
    step5 = complete_intake["step5"]
    step5["search"] = {}
    assert validate_step("step5", step5).data["search"]["radiusMiles"] == 50

    step5["search"] = {"radiusMiles": 150}
    assert not validate_step("step5", step5).success


def test_unknown_step_name():
    result = validate_step("step9", {})
    assert not result.success
    assert result.errors[0].path == "step"
    assert result.errors[0].code == "unknown_step"


class TestDraftValidation:

    def test_empty_draft_is_valid(self):
        assert validate_intake({}, draft=True).success

    def test_partial_nested_values_are_accepted(self):
        draft = {"step2": {"location": {"city": "Austin"}}, "step3": {"totalBudget": 20000}}
        result = validate_intake(draft, draft=True)
        assert result.success
        assert result.data == draft

    def test_field_constraints_still_apply(self):
        result = validate_intake({"step2": {"guests": {"estimatedGuestCount": 0}}}, draft=True)
        assert not result.success
        assert "step2.guests.estimatedGuestCount" in _paths(result)

    def test_cross_field_rules_are_skipped(self):
        draft = {
            "step3": {"categories": [{"name": "venue", "percent": 10}]},
            "step7": {"consent": False},
        }
        assert validate_intake(draft, draft=True).success

    def test_partial_models_are_cached_and_all_optional(self):
        assert make_partial_model(BudgetStep) is make_partial_model(BudgetStep)
        draft = IntakeDraft.model_validate({})
        assert draft.step1 is None and draft.step7 is None


def test_calculate_budget_remaining():
    assert calculate_budget_remaining([{"name": "venue", "percent": 45}, {"name": "catering", "percent": 30}]) == 25
    assert calculate_budget_remaining([{"name": "venue", "percent": 110}]) == -10
    assert calculate_budget_remaining([]) == 100
