"""Process configuration - loaded once from the environment, read-only afterwards."""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from dotenv import load_dotenv

from grant.models.enums import Tier


def _split_ids(raw: Optional[str]) -> FrozenSet[str]:
    """Parse a comma-separated id list, dropping blanks."""
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """
    Immutable runtime configuration.

    role_policy maps a tier name to the role ids that satisfy it. Tiers are
    not folded together here: each env var must already list every role
    that should qualify for that tier.
    """
    discord_public_key: str = ""
    database_url: str = "sqlite:///./grant.db"
    role_policy: Mapping[str, FrozenSet[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    developer_ids: FrozenSet[str] = frozenset()
    app_env: str = "production"
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        database_url = env.get("DATABASE_URL") or "sqlite:///./grant.db"
        # Render/Heroku hand out postgres:// but SQLAlchemy needs postgresql://
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)

        policy = MappingProxyType({
            Tier.MR.value: _split_ids(env.get("ROLE_IDS_MR_AND_HIGHER")),
            Tier.HR.value: _split_ids(env.get("ROLE_IDS_HR_AND_HIGHER")),
        })

        return cls(
            discord_public_key=(env.get("DISCORD_PUBLIC_KEY") or "").strip(),
            database_url=database_url,
            role_policy=policy,
            developer_ids=_split_ids(env.get("DEVELOPER_USER_IDS")),
            app_env=env.get("APP_ENV") or "production",
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """FastAPI dependency - settings are read once per process."""
    # Existing environment variables win over .env entries
    load_dotenv(override=False)
    return Settings.from_environment()
