from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime

from shared.models.settings import PlatformSetting


class SettingsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self._cache = {}
    
    async def get_setting(self, key: str, default_value=None):
        # Check cache first
        if key in self._cache:
            return self._cache[key]
        
        result = await self.session.execute(
            select(PlatformSetting).where(PlatformSetting.key == key, PlatformSetting.is_active == True)
        )
        setting = result.scalar_one_or_none()
        
        if not setting:
            value = default_value
        elif setting.boolean_value is not None:
            value = setting.boolean_value
        elif setting.integer_value is not None:
            value = setting.integer_value
        elif setting.string_value is not None:
            value = setting.string_value
        elif setting.json_value is not None:
            value = setting.json_value
        else:
            value = default_value
        
        self._cache[key] = value
        return value
    
    async def set_setting(self, key: str, value, category: str = "general", changed_by: str = None):
        result = await self.session.execute(
            select(PlatformSetting).where(PlatformSetting.key == key)
        )
        setting = result.scalar_one_or_none()
        
        if not setting:
            setting = PlatformSetting(key=key, category=category)
            self.session.add(setting)
        
        # bool before int: bool is a subclass of int
        if isinstance(value, bool):
            setting.boolean_value = value
        elif isinstance(value, int):
            setting.integer_value = value
        elif isinstance(value, str):
            setting.string_value = value
        else:
            setting.json_value = value
        
        setting.is_active = True
        setting.changed_by = changed_by
        setting.changed_at = datetime.utcnow()
        await self.session.commit()
        
        self._cache[key] = value
    
    def clear_cache(self):
        self._cache.clear()
