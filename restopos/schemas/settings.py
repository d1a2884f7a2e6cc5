from typing import Optional

from pydantic import BaseModel, field_validator

# Setting names as they appear in the backup file
SETTING_KEYS = (
    "supabase_url",
    "supabase_anon_key",
    "neon_connection_string",
    "neon_host",
)


class ConnectionSettings(BaseModel):
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    neon_connection_string: Optional[str] = None
    neon_host: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value
