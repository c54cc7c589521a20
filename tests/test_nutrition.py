"""
Dashboard arithmetic on plain dicts: no database involved.
"""
from datetime import date, datetime, timezone

import pytest

from fittrack.services import nutrition
from fittrack.services.nutrition import MacroTotals

DAY = date(2026, 3, 14)

GOALS = {
    "target_calories": 2000,
    "target_protein_ratio": 30,
    "target_carbs_ratio": 40,
    "target_fat_ratio": 30,
}


def _log(calories, protein=0, carbs=0, fat=0, meal_date=DAY, created_at=None):
    return {
        "meal_date": meal_date,
        "created_at": created_at,
        "total_calories": calories,
        "total_protein": protein,
        "total_carbs": carbs,
        "total_fat": fat,
    }


# ---------- daily totals ----------


def test_daily_totals_only_counts_the_reference_day():
    logs = [
        _log(500, 30, 50, 10),
        _log(300, 10, 40, 5),
        _log(900, 50, 90, 30, meal_date=date(2026, 3, 13)),
    ]
    totals = nutrition.daily_totals(logs, DAY)
    assert totals == MacroTotals(calories=800, protein=40, carbs=90, fat=15)


def test_daily_totals_empty_input_is_all_zeros():
    assert nutrition.daily_totals([], DAY) == MacroTotals()


def test_single_log_counts_for_its_day_only():
    logs = [_log(500, 30, 50, 20)]
    assert nutrition.daily_totals(logs, DAY) == MacroTotals(calories=500, protein=30, carbs=50, fat=20)
    assert nutrition.daily_totals(logs, date(2026, 3, 15)) == MacroTotals()


def test_daily_totals_falls_back_to_created_at_date():
    logs = [
        _log(400, meal_date=None, created_at=datetime(2026, 3, 14, 23, 30, tzinfo=timezone.utc)),
        _log(250, meal_date=None, created_at="2026-03-15T00:10:00+00:00"),
    ]
    assert nutrition.daily_totals(logs, DAY).calories == 400


def test_totals_by_day_keeps_empty_days():
    days = [date(2026, 3, 12), date(2026, 3, 13), DAY]
    result = nutrition.totals_by_day([_log(500), _log(200, meal_date=date(2026, 3, 12))], days)
    assert [result[d].calories for d in days] == [200, 0, 500]


def test_meal_totals_multiply_by_quantity():
    items = [
        {"calories": 100, "protein": 5, "carbs": 10, "fat": 2, "quantity": 2},
        {"calories": 250, "protein": 20, "carbs": 0, "fat": 15, "quantity": 1},
    ]
    totals = nutrition.meal_totals(items)
    assert totals.calories == 450
    assert totals.protein == 30
    assert totals.fat == 19


# ---------- progress ----------


def test_calorie_progress_keeps_raw_percent_and_clamps_bar():
    progress = nutrition.calorie_progress(MacroTotals(calories=2500), GOALS)
    assert progress.percent == pytest.approx(125)
    assert progress.bar_percent == 100
    assert progress.target == 2000


def test_progress_is_zero_for_missing_or_zero_target():
    assert nutrition.calorie_progress(MacroTotals(calories=800), None).percent == 0
    assert nutrition.calorie_progress(MacroTotals(calories=800), {"target_calories": 0}).percent == 0


def test_macro_targets_derive_grams_from_ratio_and_calories():
    # 30% of 2000 kcal / 4 kcal per gram = 150 g protein, 30% / 9 = 66.7 g fat
    progress = nutrition.macro_progress(MacroTotals(protein=75, carbs=100, fat=0), GOALS)
    assert progress["protein"].target == pytest.approx(150)
    assert progress["protein"].percent == pytest.approx(50)
    assert progress["carbs"].target == pytest.approx(200)
    assert progress["fat"].target == pytest.approx(66.667, rel=1e-3)
    assert progress["fat"].percent == 0


def test_protein_target_reached():
    assert nutrition.macro_target_grams(30, 2000, 4) == pytest.approx(150)
    assert nutrition.progress_percent(150, 150) == pytest.approx(100)
    assert nutrition.progress_percent(0, 150) == 0
    assert nutrition.progress_percent(150, 0) == 0


def test_macro_target_grams_missing_inputs():
    assert nutrition.macro_target_grams(None, 2000, 4) == 0
    assert nutrition.macro_target_grams(30, None, 4) == 0


def test_macro_calorie_split():
    split = nutrition.macro_calorie_split(MacroTotals(protein=25, carbs=25, fat=0))
    assert split["protein"] == {"calories": 100, "percent": 50}
    assert split["fat"]["percent"] == 0
    assert nutrition.macro_calorie_split(MacroTotals())["carbs"]["percent"] == 0


# ---------- weight ----------


def test_weight_progress_without_history_starts_at_current():
    assert nutrition.weight_progress(80, 70, "lose_weight") == 0


def test_weight_progress_with_start_weight():
    assert nutrition.weight_progress(75, 70, "lose_weight", start_weight=80) == pytest.approx(50)
    assert nutrition.weight_progress(65, 70, "gain_weight", start_weight=60) == pytest.approx(50)


def test_weight_progress_is_clamped():
    assert nutrition.weight_progress(68, 70, "lose_weight", start_weight=80) == 100
    assert nutrition.weight_progress(82, 70, "lose_weight", start_weight=80) == 0


def test_weight_progress_other_goals_and_missing_values():
    assert nutrition.weight_progress(80, 70, "maintain_weight") == 0
    assert nutrition.weight_progress(None, 70, "lose_weight") == 0


# ---------- ratios ----------


def test_check_macro_ratios():
    assert nutrition.check_macro_ratios(30, 40, 30).valid
    check = nutrition.check_macro_ratios(30, 40, 40)
    assert not check.valid
    assert check.total == 110
    assert "110" in check.warning


def test_normalize_ratios_converts_fractions_only():
    assert nutrition.normalize_ratios(0.3, 0.4, 0.3) == {"protein": 30, "carbs": 40, "fat": 30}
    assert nutrition.normalize_ratios(30, 40, 30) == {"protein": 30, "carbs": 40, "fat": 30}
    # partial input is left alone
    assert nutrition.normalize_ratios(0.3, None, None) == {"protein": 0.3, "carbs": None, "fat": None}


# ---------- recommendations ----------


def test_recommendations_default_tip():
    totals = MacroTotals(calories=1900, protein=90, carbs=120, fat=90)
    assert nutrition.recommendations(totals, GOALS, None) == [nutrition.DEFAULT_TIP]


def test_recommendations_calories_and_macros():
    totals = MacroTotals(calories=1000, protein=10, carbs=100, fat=10)
    tips = nutrition.recommendations(totals, GOALS, None)
    assert tips[0].startswith("You're 1000 calories under")
    assert any("protein" in tip for tip in tips)
    assert any("fat intake" in tip for tip in tips)
    assert not any("carb intake" in tip for tip in tips)


def test_recommendations_over_target():
    tips = nutrition.recommendations(MacroTotals(calories=2600), GOALS, None)
    assert "600 calories over" in tips[0]


def test_recommendations_weight_goal():
    profile = {"goal_type": "lose_weight", "weight_kg": 80, "target_weight": 72.5}
    tips = nutrition.recommendations(MacroTotals(calories=2000), GOALS, profile)
    assert tips == ["You're 7.5 kg away from your weight loss goal. Keep up the good work!"]


def test_today_for_unknown_zone_falls_back_to_utc():
    assert nutrition.today_for("Mars/Olympus") == datetime.now(timezone.utc).date()
