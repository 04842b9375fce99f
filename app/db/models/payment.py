from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.db.base import Base


class Payment(Base):
    """
    A payment attempt for the premium upgrade.

    Amounts are in major currency units regardless of provider; Stripe and
    Lemon Squeezy minor-unit totals are divided by 100 before storage.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    provider = Column(String, nullable=False)  # razorpay | stripe | lemon_squeezy
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String, nullable=False, default="pending")  # pending | completed | failed
    subscription_type = Column(String, nullable=False, default="monthly")  # monthly | yearly

    razorpay_order_id = Column(String, nullable=True, index=True)
    razorpay_payment_id = Column(String, nullable=True, unique=True)
    stripe_session_id = Column(String, nullable=True, unique=True)
    lemon_squeezy_order_id = Column(String, nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
