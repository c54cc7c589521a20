"""
Dashboard read model: today's totals and progress, weight progress, tips and
a weekly calorie series, computed from already-fetched rows.
"""
import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from fittrack.models.user import User
from fittrack.schemas.dashboard import ChartPoint, DashboardRead, MacroSlice, WeightProgress
from fittrack.schemas.goals import GoalsRead
from fittrack.services import nutrition
from fittrack.services.meal_logging import list_meal_logs
from fittrack.services.profiles import first_weight, get_goals, get_profile, profile_completion

logger = logging.getLogger(__name__)

CHART_DAYS = 7


def build_dashboard(db: Session, user: User, reference_date: Optional[date] = None) -> DashboardRead:
    day = reference_date or nutrition.today_for(user.timezone)
    days = [day - timedelta(days=offset) for offset in range(CHART_DAYS - 1, -1, -1)]

    logs = list_meal_logs(db, user.id, since=days[0], until=day)
    goals = get_goals(db, user.id)
    profile = get_profile(db, user.id)

    totals = nutrition.daily_totals(logs, day)
    by_day = nutrition.totals_by_day(logs, days)

    current_weight = profile.weight_kg if profile else None
    target_weight = (goals.target_weight_kg if goals else None) or (profile.target_weight if profile else None)
    goal_type = profile.goal_type if profile else None
    start_weight = first_weight(db, user.id)

    split = nutrition.macro_calorie_split(totals)

    logger.debug(f"[DASHBOARD] user_id={user.id} day={day} logs={len(logs)}")

    return DashboardRead(
        date=day,
        totals=totals,
        calories=nutrition.calorie_progress(totals, goals),
        macros=nutrition.macro_progress(totals, goals),
        macro_split={macro: MacroSlice(**values) for macro, values in split.items()},
        weight=WeightProgress(
            current_weight=current_weight,
            target_weight=target_weight,
            start_weight=start_weight,
            goal_type=goal_type,
            percent=nutrition.weight_progress(current_weight, target_weight, goal_type, start_weight),
        ),
        goals=GoalsRead.model_validate(goals) if goals else None,
        recommendations=nutrition.recommendations(totals, goals, profile),
        chart=[
            ChartPoint(date=d, **by_day[d].model_dump())
            for d in days
        ],
        profile_complete=profile_completion(profile).complete,
    )
