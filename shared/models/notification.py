from sqlalchemy import Column, String, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from .base import BaseModel


class Notification(BaseModel):
    __tablename__ = "notifications"
    
    user_id = Column(String, ForeignKey("profiles.user_id"), nullable=False, index=True)
    
    type = Column(String, nullable=False, index=True)  # subscription_expiring, subscription_expired, forum_reply
    title = Column(String, nullable=False)
    message = Column(Text, nullable=True)
    link = Column(String, nullable=True)
    is_read = Column(Boolean, default=False)
    
    # Relationships
    profile = relationship("Profile", back_populates="notifications")
