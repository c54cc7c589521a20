"""
Onboarding, profile, goals, preferences and weight logs.

One profile/goals/preferences row per user, upserted on save.
Goal and preference saves publish a change event after commit.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from fittrack.models.user import User
from fittrack.models.user_goals import UserGoals
from fittrack.models.user_preferences import UserPreferences
from fittrack.models.user_profile import UserProfile
from fittrack.models.weight_log import WeightLog
from fittrack.schemas.goals import GoalsRead, GoalsUpdate
from fittrack.schemas.preferences import PreferencesData
from fittrack.schemas.profile import (
    REQUIRED_PROFILE_FIELDS,
    OnboardingRequest,
    ProfileCompletion,
    ProfileUpdate,
)
from fittrack.services.nutrition import MacroRatioCheck, check_macro_ratios
from fittrack.services.realtime import ChangeFeed

logger = logging.getLogger(__name__)

DEFAULT_GOALS = {
    "target_calories": 2000,
    "target_protein_ratio": 30,
    "target_carbs_ratio": 40,
    "target_fat_ratio": 30,
}


def _row_dict(row: Any, fields) -> Dict[str, Any]:
    data = {}
    for field in fields:
        value = getattr(row, field)
        data[field] = value.isoformat() if hasattr(value, "isoformat") else value
    return data


# ---------- PROFILE ----------


def get_profile(db: Session, user_id: int) -> Optional[UserProfile]:
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()


def _get_or_new_profile(db: Session, user_id: int) -> UserProfile:
    profile = get_profile(db, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id)
        db.add(profile)
    return profile


def upsert_profile(db: Session, user: User, data: ProfileUpdate) -> UserProfile:
    profile = _get_or_new_profile(db, user.id)
    for field, value in data.model_dump().items():
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    logger.info(f"[PROFILE] Saved profile for user_id={user.id}")
    return profile


def profile_completion(profile: Optional[UserProfile]) -> ProfileCompletion:
    if profile is None:
        return ProfileCompletion(complete=False, missing_fields=list(REQUIRED_PROFILE_FIELDS))
    missing = [field for field in REQUIRED_PROFILE_FIELDS if getattr(profile, field) in (None, "")]
    return ProfileCompletion(complete=not missing, missing_fields=missing)


def complete_onboarding(
    db: Session,
    user: User,
    data: OnboardingRequest,
    feed: Optional[ChangeFeed] = None,
) -> Tuple[UserProfile, UserGoals]:
    """
    Save the questionnaire into the profile and make sure the user has goals.
    Existing goals are kept; a target weight from onboarding fills an empty
    target_weight_kg. The first weight log is the onboarding weight.
    """
    profile = _get_or_new_profile(db, user.id)
    for field, value in data.model_dump(exclude={"preferred_meal_times"}).items():
        setattr(profile, field, value)

    goals = get_goals(db, user.id)
    created = goals is None
    if created:
        goals = UserGoals(user_id=user.id, **DEFAULT_GOALS)
        db.add(goals)
    if data.target_weight and not goals.target_weight_kg:
        goals.target_weight_kg = data.target_weight
    # onboarding weight is the start of weight progress
    if not db.query(WeightLog.id).filter(WeightLog.user_id == user.id).first():
        db.add(WeightLog(user_id=user.id, weight=data.weight_kg))

    db.commit()
    db.refresh(profile)
    db.refresh(goals)
    logger.info(f"[ONBOARDING] Completed for user_id={user.id}, goals_created={created}")

    if feed is not None:
        feed.publish(
            UserGoals.__tablename__,
            "INSERT" if created else "UPDATE",
            GoalsRead.model_validate(goals).model_dump(mode="json"),
        )
    return profile, goals


# ---------- GOALS ----------


def get_goals(db: Session, user_id: int) -> Optional[UserGoals]:
    return db.query(UserGoals).filter(UserGoals.user_id == user_id).first()


def upsert_goals(
    db: Session,
    user: User,
    data: GoalsUpdate,
    feed: Optional[ChangeFeed] = None,
) -> Tuple[UserGoals, MacroRatioCheck]:
    """
    Save the goals form. Ratios not adding up to 100 are saved anyway and
    reported back as a warning.
    """
    goals = get_goals(db, user.id)
    created = goals is None
    if created:
        goals = UserGoals(user_id=user.id, **DEFAULT_GOALS)
        db.add(goals)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(goals, field, value)

    db.commit()
    db.refresh(goals)

    check = check_macro_ratios(
        goals.target_protein_ratio,
        goals.target_carbs_ratio,
        goals.target_fat_ratio,
    )
    if not check.valid:
        logger.info(f"[GOALS] user_id={user.id} saved ratios summing to {check.total:g}")

    if feed is not None:
        feed.publish(
            UserGoals.__tablename__,
            "INSERT" if created else "UPDATE",
            GoalsRead.model_validate(goals).model_dump(mode="json"),
        )
    return goals, check


# ---------- PREFERENCES ----------


def get_preferences(db: Session, user_id: int) -> Optional[UserPreferences]:
    return db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()


def upsert_preferences(
    db: Session,
    user: User,
    data: PreferencesData,
    feed: Optional[ChangeFeed] = None,
) -> UserPreferences:
    row = get_preferences(db, user.id)
    created = row is None
    if created:
        row = UserPreferences(user_id=user.id)
        db.add(row)
    row.preferences = data.model_dump()

    db.commit()
    db.refresh(row)
    logger.info(f"[PREFERENCES] Saved preferences for user_id={user.id}")

    if feed is not None:
        payload = _row_dict(row, ("user_id", "updated_at"))
        payload["preferences"] = row.preferences
        feed.publish(UserPreferences.__tablename__, "INSERT" if created else "UPDATE", payload)
    return row


def preferences_data(row: Optional[UserPreferences]) -> PreferencesData:
    if row is None or not row.preferences:
        return PreferencesData()
    return PreferencesData(**row.preferences)


# ---------- WEIGHT ----------


def log_weight(db: Session, user: User, weight: float) -> WeightLog:
    """Record a weight entry and make it the profile's current weight."""
    entry = WeightLog(user_id=user.id, weight=weight)
    db.add(entry)

    profile = get_profile(db, user.id)
    if profile is not None:
        profile.weight_kg = weight

    db.commit()
    db.refresh(entry)
    logger.info(f"[WEIGHT] user_id={user.id} logged {weight} kg")
    return entry


def list_weight_logs(db: Session, user_id: int, limit: int = 30) -> List[WeightLog]:
    return (
        db.query(WeightLog)
        .filter(WeightLog.user_id == user_id)
        .order_by(WeightLog.created_at.desc(), WeightLog.id.desc())
        .limit(limit)
        .all()
    )


def first_weight(db: Session, user_id: int) -> Optional[float]:
    """Earliest recorded weight, used as the start of the weight goal."""
    entry = (
        db.query(WeightLog)
        .filter(WeightLog.user_id == user_id)
        .order_by(WeightLog.created_at.asc(), WeightLog.id.asc())
        .first()
    )
    return entry.weight if entry else None
