from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    Float,
    String,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from fittrack.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MealLog(Base):
    __tablename__ = "meal_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    meal_type = Column(String, nullable=False)      # breakfast / lunch / dinner / snack
    meal_date = Column(Date, nullable=True, index=True)
    meal_time = Column(String, nullable=True)       # HH:MM
    notes = Column(String, nullable=True)

    total_calories = Column(Float, nullable=False, default=0)
    total_protein = Column(Float, default=0)
    total_carbs = Column(Float, default=0)
    total_fat = Column(Float, default=0)

    source = Column(String, nullable=False)         # search / barcode / quick_add / manual / chat

    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)

    user = relationship("User", back_populates="meal_logs")
    food_items = relationship(
        "FoodItem",
        back_populates="meal_log",
        cascade="all, delete-orphan",
    )
