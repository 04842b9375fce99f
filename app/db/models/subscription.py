from sqlalchemy import Column, Integer, String, Numeric, Date, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from app.db.base import Base


class Subscription(Base):
    """A recurring subscription a user tracks. Prices are stored in USD."""
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    billing_cycle = Column(String, nullable=False, default="monthly")  # monthly | yearly
    renewal_date = Column(Date, nullable=False)
    category = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_subscriptions_user_active", "user_id", "is_active"),
    )
