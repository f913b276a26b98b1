from sqlalchemy import Column, String, Boolean, BigInteger, ForeignKey, Integer
from sqlalchemy.orm import relationship
from .base import BaseModel


class Role(BaseModel):
    __tablename__ = "roles"
    
    name = Column(String, unique=True, nullable=False)  # free, basic, premium, admin
    display_name = Column(String, nullable=True)
    price = Column(Integer, default=0)
    
    profiles = relationship("Profile", back_populates="role")


class Profile(BaseModel):
    __tablename__ = "profiles"
    
    user_id = Column(String, unique=True, index=True, nullable=False)  # auth provider id
    display_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    nickname = Column(String, nullable=True)
    email = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    
    role_id = Column(BigInteger, ForeignKey("roles.id"), nullable=True)
    points = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    
    # Relationships
    role = relationship("Role", back_populates="profiles")
    subscriptions = relationship("Subscription", back_populates="profile")
    notifications = relationship("Notification", back_populates="profile")
