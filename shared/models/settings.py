from sqlalchemy import Column, String, Text, Integer, Boolean, JSON, DateTime
from .base import BaseModel


class PlatformSetting(BaseModel):
    """Admin-editable key/value switch; exactly one *_value column is set"""
    __tablename__ = "platform_settings"
    
    key = Column(String, unique=True, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)  # subscriptions, forums, general
    
    string_value = Column(Text, nullable=True)
    integer_value = Column(Integer, nullable=True)
    boolean_value = Column(Boolean, nullable=True)
    json_value = Column(JSON, nullable=True)
    
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    
    changed_by = Column(String, nullable=True)
    changed_at = Column(DateTime, nullable=True)
