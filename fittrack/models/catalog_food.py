from sqlalchemy import Column, Integer, String, Float, DateTime, func

from fittrack.db.base import Base


class CatalogFood(Base):
    """Searchable food catalog entry (search and barcode lookup)."""

    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    calories = Column(Float, default=0)
    protein = Column(Float, default=0)
    carbs = Column(Float, default=0)
    fat = Column(Float, default=0)

    serving_size = Column(Float, default=100)
    serving_unit = Column(String, default="g")
    barcode = Column(String, unique=True, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
