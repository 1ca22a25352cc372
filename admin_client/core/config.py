# admin_client/core/config.py
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class PurgePolicy(str, Enum):
    """When a failed admin call wipes the stored credential."""
    ALWAYS = "always"        # any failure forces re-authentication
    AUTH_ONLY = "auth_only"  # only 401/403 responses


class Settings(BaseSettings):
    api_base_url: Optional[str] = None
    api_timeout_s: float = 30.0
    credential_file: Path = Path(".admin_session")
    credential_ttl_days: int = 7
    cookie_secure: bool = True
    purge_policy: PurgePolicy = PurgePolicy.ALWAYS

    model_config = SettingsConfigDict(env_prefix="ADMIN_", env_file=".env", extra="ignore")


def get_settings() -> Settings:
    # Built fresh on every call so a changed environment is picked up.
    return Settings()
