from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    func,
)
from sqlalchemy.orm import relationship

from fittrack.db.base import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    full_name = Column(String, nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String, nullable=True)          # male / female / other
    height_cm = Column(Float, nullable=True)
    weight_kg = Column(Float, nullable=True)
    activity_level = Column(String, nullable=True)  # sedentary ... extra_active

    goal_type = Column(String, nullable=True)       # lose_weight / maintain_weight / gain_weight / build_muscle
    target_weight = Column(Float, nullable=True)
    target_date = Column(Date, nullable=True)

    dietary_restrictions = Column(JSON, default=list)
    allergies = Column(JSON, default=list)
    medical_conditions = Column(JSON, default=list)
    fitness_level = Column(String, nullable=True)
    preferred_workout_days = Column(JSON, default=list)
    weekly_workout_goal = Column(Integer, nullable=True)
    water_intake_goal = Column(Float, nullable=True)
    sleep_goal = Column(Float, nullable=True)
    meal_prep_preference = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="profile")
