import logging
from datetime import date as date_type
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fittrack.deps import get_current_user, get_db, get_webhook_client
from fittrack.models.meal_log import MealLog
from fittrack.models.user import User
from fittrack.schemas.meal import DaySummary, MealLogCreate, MealLogRead, QuickAddRequest
from fittrack.services import meal_logging, webhooks
from fittrack.services.webhooks import WebhookClient, build_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["meals"])


async def _notify_meal_logged(client: WebhookClient, meal: MealLog) -> None:
    meal_data = MealLogRead.model_validate(meal).model_dump(mode="json")
    await client.notify(
        webhooks.MEAL_LOG,
        build_payload(meal.user_id, source=meal.source, **{k: v for k, v in meal_data.items() if k != "user_id"}),
    )


@router.post("/meals", response_model=MealLogRead, status_code=201)
async def create_meal(
    meal_in: MealLogCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: WebhookClient = Depends(get_webhook_client),
):
    """
    Log a meal:
    - food_items carry per-serving values and a quantity
    - totals are computed here, not taken from the client
    """
    meal = meal_logging.log_meal(db, user, meal_in)
    await _notify_meal_logged(client, meal)
    return meal


@router.post("/meals/quick-add", response_model=MealLogRead, status_code=201)
async def quick_add_meal(
    payload: QuickAddRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: WebhookClient = Depends(get_webhook_client),
):
    meal = meal_logging.quick_add(db, user, payload)
    await _notify_meal_logged(client, meal)
    return meal


@router.get("/meals", response_model=List[MealLogRead])
def read_meals(
    since: Optional[date_type] = None,
    until: Optional[date_type] = None,
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return meal_logging.list_meal_logs(db, user.id, since=since, until=until, limit=limit)


@router.get("/meals/recent", response_model=List[MealLogRead])
def read_recent_meals(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return meal_logging.recent_meal_logs(db, user.id, limit=limit)


@router.get("/day/{day}", response_model=DaySummary)
def get_day_summary(
    day: date_type,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Totals and meals for one calendar day; an empty day is all zeros."""
    return meal_logging.day_summary(db, user, day)
