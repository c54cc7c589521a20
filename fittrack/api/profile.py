import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fittrack.core.errors import NotFoundError
from fittrack.deps import get_change_feed, get_current_user, get_db, get_webhook_client
from fittrack.models.user import User
from fittrack.schemas.goals import GoalsRead, GoalsSaved, GoalsUpdate
from fittrack.schemas.preferences import PreferencesData, PreferencesRead
from fittrack.schemas.profile import OnboardingRequest, ProfileCompletion, ProfileRead, ProfileUpdate
from fittrack.schemas.weight import WeightLogCreate, WeightLogRead
from fittrack.services import profiles, webhooks
from fittrack.services.realtime import ChangeFeed
from fittrack.services.webhooks import WebhookClient, build_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["profile"])


# ---------- ONBOARDING ----------


@router.post("/onboarding", response_model=ProfileRead)
async def complete_onboarding(
    payload: OnboardingRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    client: WebhookClient = Depends(get_webhook_client),
):
    """
    Save the onboarding questionnaire, seed default goals and let the
    onboarding workflow know (best effort).
    """
    profile, _goals = profiles.complete_onboarding(db, user, payload, feed=feed)
    await client.notify(
        webhooks.ONBOARDING,
        build_payload(user.id, source="onboarding", profile=payload.model_dump(mode="json")),
    )
    return profile


# ---------- PROFILE ----------


@router.get("/profile", response_model=ProfileRead)
def read_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = profiles.get_profile(db, user.id)
    if not profile:
        raise NotFoundError("Profile not found. Complete onboarding first.")
    return profile


@router.put("/profile", response_model=ProfileRead)
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return profiles.upsert_profile(db, user, payload)


@router.get("/profile/completion", response_model=ProfileCompletion)
def read_profile_completion(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profiles.profile_completion(profiles.get_profile(db, user.id))


# ---------- GOALS ----------


@router.get("/goals", response_model=GoalsRead)
def read_goals(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    goals = profiles.get_goals(db, user.id)
    if not goals:
        raise NotFoundError("Goals not set")
    return goals


@router.put("/goals", response_model=GoalsSaved)
def save_goals(
    payload: GoalsUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Upsert goals. Ratios that do not add up to 100 come back as a warning."""
    goals, check = profiles.upsert_goals(db, user, payload, feed=feed)
    return GoalsSaved(goals=GoalsRead.model_validate(goals), ratio_check=check)


# ---------- PREFERENCES ----------


@router.get("/preferences", response_model=PreferencesRead)
def read_preferences(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    row = profiles.get_preferences(db, user.id)
    return PreferencesRead(
        user_id=user.id,
        preferences=profiles.preferences_data(row),
        updated_at=row.updated_at if row else None,
    )


@router.put("/preferences", response_model=PreferencesRead)
def save_preferences(
    payload: PreferencesData,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    row = profiles.upsert_preferences(db, user, payload, feed=feed)
    return PreferencesRead(
        user_id=user.id,
        preferences=profiles.preferences_data(row),
        updated_at=row.updated_at,
    )


# ---------- WEIGHT ----------


@router.post("/weight", response_model=WeightLogRead, status_code=201)
def log_weight(
    payload: WeightLogCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return profiles.log_weight(db, user, payload.weight)


@router.get("/weight", response_model=List[WeightLogRead])
def read_weight_logs(
    limit: int = Query(30, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return profiles.list_weight_logs(db, user.id, limit=limit)
