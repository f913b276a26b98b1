from sqlalchemy import Column, String, BigInteger, DateTime, Boolean, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from .base import BaseModel


class Subscription(BaseModel):
    __tablename__ = "subscriptions"
    
    user_id = Column(String, ForeignKey("profiles.user_id"), nullable=False, index=True)
    
    # Plan
    role_id = Column(BigInteger, ForeignKey("roles.id"), nullable=False)
    previous_role_id = Column(BigInteger, ForeignKey("roles.id"), nullable=True)
    
    # Status
    status = Column(String, nullable=False, default="pending", index=True)  # active, pending, cancelled, expired
    auto_renew = Column(Boolean, default=False)
    warning_sent = Column(Boolean, default=False)
    
    # Timing
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)  # NULL = unlimited
    
    # Relationships
    profile = relationship("Profile", back_populates="subscriptions")
    role = relationship("Role", foreign_keys=[role_id])
    previous_role = relationship("Role", foreign_keys=[previous_role_id])
    payments = relationship("Payment", back_populates="subscription")


class Payment(BaseModel):
    __tablename__ = "payments"
    
    subscription_id = Column(BigInteger, ForeignKey("subscriptions.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String, default="ILS")
    status = Column(String, nullable=False, default="pending")  # pending, completed, failed, refunded
    payment_method = Column(String, nullable=True)
    payment_date = Column(DateTime, nullable=True)
    
    # Relationships
    subscription = relationship("Subscription", back_populates="payments")
