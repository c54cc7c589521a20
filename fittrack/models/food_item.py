from sqlalchemy import Column, Integer, String, Float, ForeignKey
from sqlalchemy.orm import relationship

from fittrack.db.base import Base


class FoodItem(Base):
    """Food item inside a logged meal. Values are per serving."""

    __tablename__ = "meal_food_items"

    id = Column(Integer, primary_key=True, index=True)
    meal_log_id = Column(
        Integer, ForeignKey("meal_logs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)

    calories = Column(Float, default=0)
    protein = Column(Float, default=0)
    carbs = Column(Float, default=0)
    fat = Column(Float, default=0)

    quantity = Column(Float, default=1)
    unit = Column(String, nullable=False, default="serving")
    barcode = Column(String, nullable=True)

    meal_log = relationship("MealLog", back_populates="food_items")
