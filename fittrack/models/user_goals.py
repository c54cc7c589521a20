from sqlalchemy import Column, Integer, Float, Date, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from fittrack.db.base import Base


class UserGoals(Base):
    __tablename__ = "user_goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    target_calories = Column(Float, default=2000)

    # Доли макросов в процентах 0-100
    target_protein_ratio = Column(Float, default=30)
    target_carbs_ratio = Column(Float, default=40)
    target_fat_ratio = Column(Float, default=30)

    target_weight_kg = Column(Float, nullable=True)
    target_date = Column(Date, nullable=True)
    weekly_workout_goal = Column(Integer, nullable=True)
    water_intake_goal = Column(Float, nullable=True)
    sleep_goal = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="goals")
