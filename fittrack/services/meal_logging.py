"""
Meal logging: persist a meal with its food items and read logs back.

Totals are computed from the items (per-serving value x quantity); each item
row keeps its per-serving values. Meal logs are not edited after creation.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload

from fittrack.models.food_item import FoodItem
from fittrack.models.meal_log import MealLog
from fittrack.models.user import User
from fittrack.schemas.meal import DaySummary, FoodItemCreate, MealLogCreate, MealLogRead, QuickAddRequest
from fittrack.services.nutrition import daily_totals, meal_log_date, meal_totals, now_for

logger = logging.getLogger(__name__)


def log_meal(db: Session, user: User, meal_in: MealLogCreate) -> MealLog:
    totals = meal_totals(meal_in.food_items)

    meal = MealLog(
        user_id=user.id,
        meal_type=meal_in.meal_type,
        meal_date=meal_in.meal_date,
        meal_time=meal_in.meal_time,
        notes=meal_in.notes,
        total_calories=totals.calories,
        total_protein=totals.protein,
        total_carbs=totals.carbs,
        total_fat=totals.fat,
        source=meal_in.source,
    )
    meal.food_items = [
        FoodItem(
            name=item.name,
            calories=item.calories,
            protein=item.protein,
            carbs=item.carbs,
            fat=item.fat,
            quantity=item.quantity,
            unit=item.unit,
            barcode=item.barcode,
        )
        for item in meal_in.food_items
    ]

    try:
        db.add(meal)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"[MEALS] Error saving meal for user_id={user.id}: {e}", exc_info=True)
        raise
    db.refresh(meal)

    logger.info(
        f"[MEALS] Saved meal: user_id={user.id}, meal_id={meal.id}, "
        f"items={len(meal.food_items)}, calories={meal.total_calories}, source={meal.source}"
    )
    return meal


def quick_add(db: Session, user: User, payload: QuickAddRequest) -> MealLog:
    """Single-item meal for the current moment in the user's zone."""
    now = now_for(user.timezone)
    meal_date = payload.meal_date or now.date()
    meal_time = payload.meal_time or now.strftime("%H:%M")

    meal_in = MealLogCreate(
        meal_type=payload.meal_type,
        meal_date=meal_date,
        meal_time=meal_time,
        source="quick_add",
        food_items=[
            FoodItemCreate(
                name=payload.name,
                calories=payload.calories,
                protein=payload.protein,
                carbs=payload.carbs,
                fat=payload.fat,
                quantity=1,
                unit="serving",
            )
        ],
    )
    return log_meal(db, user, meal_in)


def list_meal_logs(
    db: Session,
    user_id: int,
    since: Optional[date] = None,
    until: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[MealLog]:
    """
    Meal logs of a user, oldest first. A log is in the window when its
    meal_date is, or (without meal_date) when created_at is within a day of
    it; the aggregator does the exact calendar-date match.
    """
    query = (
        db.query(MealLog)
        .options(selectinload(MealLog.food_items))
        .filter(MealLog.user_id == user_id)
    )
    if since is not None:
        query = query.filter(
            or_(
                MealLog.meal_date >= since,
                and_(
                    MealLog.meal_date.is_(None),
                    MealLog.created_at >= datetime.combine(since - timedelta(days=1), time.min),
                ),
            )
        )
    if until is not None:
        query = query.filter(
            or_(
                MealLog.meal_date <= until,
                and_(
                    MealLog.meal_date.is_(None),
                    MealLog.created_at < datetime.combine(until + timedelta(days=2), time.min),
                ),
            )
        )
    query = query.order_by(MealLog.created_at.asc(), MealLog.id.asc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def recent_meal_logs(db: Session, user_id: int, limit: int = 10) -> List[MealLog]:
    return (
        db.query(MealLog)
        .options(selectinload(MealLog.food_items))
        .filter(MealLog.user_id == user_id)
        .order_by(MealLog.created_at.desc(), MealLog.id.desc())
        .limit(limit)
        .all()
    )


def day_summary(db: Session, user: User, day: date) -> DaySummary:
    logs = list_meal_logs(db, user.id, since=day, until=day)
    totals = daily_totals(logs, day)
    return DaySummary(
        date=day,
        total_calories=totals.calories,
        total_protein=totals.protein,
        total_carbs=totals.carbs,
        total_fat=totals.fat,
        meals=[MealLogRead.model_validate(log) for log in logs if meal_log_date(log) == day],
    )
