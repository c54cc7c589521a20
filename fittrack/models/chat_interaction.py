from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship

from fittrack.db.base import Base


class ChatInteraction(Base):
    __tablename__ = "chat_interactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    message = Column(String, nullable=False)
    response = Column(JSON, nullable=True)   # raw webhook answer for bot messages
    is_bot = Column(Boolean, nullable=False, default=False)
    confirmed = Column(Boolean, nullable=False, default=True)
    # "metadata" зарезервировано в declarative API
    metadata_ = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", back_populates="chat_interactions")
