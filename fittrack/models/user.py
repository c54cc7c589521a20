from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship

from fittrack.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    # IANA имя, например "Europe/Berlin"; None = settings.default_timezone
    timezone = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Связи
    profile = relationship("UserProfile", back_populates="user", uselist=False)
    goals = relationship("UserGoals", back_populates="user", uselist=False)
    preferences = relationship("UserPreferences", back_populates="user", uselist=False)
    meal_logs = relationship("MealLog", back_populates="user")
    weight_logs = relationship("WeightLog", back_populates="user")
    chat_interactions = relationship("ChatInteraction", back_populates="user")
