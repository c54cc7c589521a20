"""
Nutrition arithmetic for the dashboard: daily totals, percent of goal,
ratio-derived gram targets, weight-goal progress and rule-based tips.

Everything here works on rows that are already fetched. A row can be an ORM
object, a pydantic model or a plain dict.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

import pytz
from pydantic import BaseModel

from fittrack.core.config import settings

logger = logging.getLogger(__name__)

KCAL_PER_GRAM = {
    "protein": 4,
    "carbs": 4,
    "fat": 9,
}

MACROS = ("protein", "carbs", "fat")

# Отклонение калорий от цели, после которого даём совет
CALORIE_TIP_THRESHOLD = 500
# Доля макроса ниже 80% от целевой = "ниже цели"
MACRO_SHORTFALL_FACTOR = 0.8

DEFAULT_TIP = "Keep tracking your meals to get personalized recommendations!"


class MacroTotals(BaseModel):
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


class Progress(BaseModel):
    """
    current/target pair with two views of the same ratio:
    percent is raw (for "X% of daily goal" text),
    bar_percent is clamped to [0, 100] (for progress bars).
    """
    current: float
    target: float
    percent: float
    bar_percent: float


class MacroRatioCheck(BaseModel):
    total: float
    valid: bool
    warning: Optional[str] = None


def _get(row: Any, name: str, default: Any = None) -> Any:
    if row is None:
        return default
    if isinstance(row, dict):
        value = row.get(name, default)
    else:
        value = getattr(row, name, default)
    return default if value is None else value


def _num(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


# ---------- DATES ----------


def now_for(tz_name: Optional[str] = None) -> datetime:
    """Current time in the given IANA zone (default: settings.default_timezone)."""
    name = tz_name or settings.default_timezone
    try:
        tz = pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"[NUTRITION] Unknown timezone {name!r}, using UTC")
        tz = pytz.utc
    return datetime.now(tz)


def today_for(tz_name: Optional[str] = None) -> date:
    return now_for(tz_name).date()


def _calendar_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def meal_log_date(row: Any) -> Optional[date]:
    """
    Calendar date a meal log counts for: meal_date when set, otherwise the
    date part of created_at exactly as stored. Time of day and the UTC offset
    are dropped without converting zones, so a log written near midnight in
    another zone can land on the neighbouring day.
    """
    meal_date = _calendar_date(_get(row, "meal_date"))
    if meal_date is not None:
        return meal_date
    return _calendar_date(_get(row, "created_at"))


# ---------- AGGREGATION ----------


def daily_totals(
    meal_logs: Iterable[Any],
    reference_date: Optional[date] = None,
    tz_name: Optional[str] = None,
) -> MacroTotals:
    """
    Sum total_calories/protein/carbs/fat of the logs that fall on reference_date.
    An empty or non-matching input gives all zeros.
    """
    day = reference_date or today_for(tz_name)
    totals = MacroTotals()
    for row in meal_logs:
        if meal_log_date(row) != day:
            continue
        totals.calories += _num(_get(row, "total_calories"))
        totals.protein += _num(_get(row, "total_protein"))
        totals.carbs += _num(_get(row, "total_carbs"))
        totals.fat += _num(_get(row, "total_fat"))
    return totals


def totals_by_day(meal_logs: Iterable[Any], days: List[date]) -> Dict[date, MacroTotals]:
    """Per-day totals for the chart; days without logs stay at zero."""
    result = {day: MacroTotals() for day in days}
    for row in meal_logs:
        bucket = result.get(meal_log_date(row))
        if bucket is None:
            continue
        bucket.calories += _num(_get(row, "total_calories"))
        bucket.protein += _num(_get(row, "total_protein"))
        bucket.carbs += _num(_get(row, "total_carbs"))
        bucket.fat += _num(_get(row, "total_fat"))
    return result


def meal_totals(food_items: Iterable[Any]) -> MacroTotals:
    """Meal totals from per-serving item values multiplied by quantity."""
    totals = MacroTotals()
    for item in food_items:
        quantity = _num(_get(item, "quantity", 1))
        totals.calories += _num(_get(item, "calories")) * quantity
        totals.protein += _num(_get(item, "protein")) * quantity
        totals.carbs += _num(_get(item, "carbs")) * quantity
        totals.fat += _num(_get(item, "fat")) * quantity
    return totals


# ---------- GOAL PROGRESS ----------


def clamp_percent(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def macro_target_grams(ratio_percent: Any, total_calories: Any, kcal_per_gram: float) -> float:
    """
    Grams of a macro that make up ratio_percent of total_calories.
    Missing or zero inputs give 0.
    """
    ratio = _num(ratio_percent)
    calories = _num(total_calories)
    if not ratio or not calories or not kcal_per_gram:
        return 0.0
    return ratio * calories / (100 * kcal_per_gram)


def progress_percent(observed: Any, target: Any) -> float:
    """observed / target * 100, unclamped; 0 when the target is missing or zero."""
    target_value = _num(target)
    if not target_value:
        return 0.0
    return _num(observed) / target_value * 100


def build_progress(current: Any, target: Any) -> Progress:
    percent = progress_percent(current, target)
    return Progress(
        current=_num(current),
        target=_num(target),
        percent=percent,
        bar_percent=clamp_percent(percent),
    )


def calorie_progress(totals: MacroTotals, goals: Any) -> Progress:
    return build_progress(totals.calories, _get(goals, "target_calories"))


def macro_progress(totals: MacroTotals, goals: Any) -> Dict[str, Progress]:
    """
    Progress per macro. Gram targets come from the goal ratios applied to
    target_calories.
    """
    target_calories = _get(goals, "target_calories")
    result = {}
    for macro in MACROS:
        grams = macro_target_grams(
            _get(goals, f"target_{macro}_ratio"),
            target_calories,
            KCAL_PER_GRAM[macro],
        )
        result[macro] = build_progress(getattr(totals, macro), grams)
    return result


def macro_calorie_split(totals: MacroTotals) -> Dict[str, Dict[str, float]]:
    """Calories contributed by each macro and their share, for the pie chart."""
    calories = {macro: getattr(totals, macro) * KCAL_PER_GRAM[macro] for macro in MACROS}
    total = sum(calories.values())
    return {
        macro: {
            "calories": value,
            "percent": value / total * 100 if total else 0.0,
        }
        for macro, value in calories.items()
    }


# ---------- WEIGHT PROGRESS ----------


def weight_progress(
    current: Any,
    target: Any,
    goal_type: Optional[str],
    start_weight: Any = None,
) -> float:
    """
    Percent of the way from the start weight to the target, clamped to [0, 100].

    Without a recorded start weight the start is approximated as
    max(current, target) for lose_weight and min(current, target) for
    gain_weight. Other goal types have no weight progress (0).
    """
    current_kg = _num(current)
    target_kg = _num(target)
    if not current_kg or not target_kg:
        return 0.0

    if goal_type == "lose_weight":
        start = _num(start_weight) or max(current_kg, target_kg)
        span = start - target_kg
        if span <= 0:
            return 0.0
        return clamp_percent((start - current_kg) / span * 100)

    if goal_type == "gain_weight":
        start = _num(start_weight) or min(current_kg, target_kg)
        span = target_kg - start
        if span <= 0:
            return 0.0
        return clamp_percent((current_kg - start) / span * 100)

    return 0.0


# ---------- RATIOS ----------


def check_macro_ratios(protein: Any, carbs: Any, fat: Any) -> MacroRatioCheck:
    """Ratios should add up to 100. A mismatch is a warning, not a rejection."""
    total = _num(protein) + _num(carbs) + _num(fat)
    if abs(total - 100) < 1e-6:
        return MacroRatioCheck(total=total, valid=True)
    return MacroRatioCheck(
        total=total,
        valid=False,
        warning=f"Macronutrient ratios add up to {total:g}%, not 100%",
    )


def normalize_ratios(
    protein: Optional[float],
    carbs: Optional[float],
    fat: Optional[float],
) -> Dict[str, Optional[float]]:
    """
    Convert fraction-form ratios (0.3 / 0.4 / 0.3) to percents.
    Only converts when all three are set, each is <= 1 and they sum to ~1;
    anything else is taken as percents already.
    """
    values = {"protein": protein, "carbs": carbs, "fat": fat}
    present = [v for v in values.values() if v is not None]
    if len(present) == 3 and all(0 <= v <= 1 for v in present) and abs(sum(present) - 1) < 0.011:
        return {key: round(value * 100, 4) for key, value in values.items()}
    return values


# ---------- RECOMMENDATIONS ----------


def recommendations(totals: MacroTotals, goals: Any, profile: Any) -> List[str]:
    tips = []

    target_calories = _num(_get(goals, "target_calories"))
    if target_calories:
        diff = target_calories - totals.calories
        if diff > CALORIE_TIP_THRESHOLD:
            tips.append(
                f"You're {diff:.0f} calories under your daily target. Consider adding a healthy snack."
            )
        elif diff < -CALORIE_TIP_THRESHOLD:
            tips.append(
                f"You're {abs(diff):.0f} calories over your daily target. Consider adjusting your next meal."
            )

    ratios = {macro: _num(_get(goals, f"target_{macro}_ratio")) for macro in MACROS}
    eaten = totals.protein + totals.carbs + totals.fat
    if all(ratios.values()) and eaten > 0:
        advice = {
            "protein": "Your protein intake is below target. Consider adding more protein-rich foods.",
            "carbs": "Your carb intake is below target. Consider adding more complex carbohydrates.",
            "fat": "Your fat intake is below target. Consider adding healthy fats to your meals.",
        }
        for macro in MACROS:
            share = getattr(totals, macro) / eaten * 100
            if share < ratios[macro] * MACRO_SHORTFALL_FACTOR:
                tips.append(advice[macro])

    goal_type = _get(profile, "goal_type")
    current = _num(_get(profile, "weight_kg"))
    target = _num(_get(profile, "target_weight"))
    if goal_type and current and target:
        remaining = current - target
        if goal_type == "lose_weight" and remaining > 0:
            tips.append(f"You're {remaining:.1f} kg away from your weight loss goal. Keep up the good work!")
        elif goal_type == "gain_weight" and remaining < 0:
            tips.append(f"You're {abs(remaining):.1f} kg away from your weight gain goal. Keep up the good work!")

    return tips or [DEFAULT_TIP]
