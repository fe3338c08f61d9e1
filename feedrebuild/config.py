"""
Run configuration for the rebuild.

Every pass receives a RebuildConfig explicitly; nothing reads settings
from module globals. Values come from defaults, FEEDREBUILD_* environment
variables (optionally via .env), and CLI overrides, in that order.
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

from .env import load_env

ENV_PREFIX = "FEEDREBUILD_"

DEFAULT_MAX_AGE = 90 * 24 * 3600
DEFAULT_BATCH_LIMIT = 5000

DEFAULT_LOG_TYPES = [
    "",
    "block",
    "protect",
    "rights",
    "delete",
    "upload",
    "move",
    "import",
    "patrol",
    "merge",
    "suppress",
    "tag",
    "managetags",
    "contentmodel",
]

DEFAULT_LOG_RESTRICTIONS = {"suppress": "suppressionlog"}

DEFAULT_GROUP_PERMISSIONS = {
    "bot": ["bot", "autopatrol"],
    "sysop": ["autopatrol"],
}

DEFAULT_FEED_CLASSES = {"rss": "RSSFeed", "atom": "AtomFeed"}


def _env(name: str) -> Optional[str]:
    return os.getenv(ENV_PREFIX + name)


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = _env(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",")]


def _env_json(name: str, default: dict) -> dict:
    raw = _env(name)
    if raw is None or raw.strip() == "":
        return dict(default)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"{ENV_PREFIX}{name} must be a JSON object: {e}")
    if not isinstance(value, dict):
        raise ValueError(f"{ENV_PREFIX}{name} must be a JSON object")
    return value


@dataclass
class RebuildConfig:
    """Settings shared by all rebuild passes."""

    max_age: int = DEFAULT_MAX_AGE  # seconds of history to seed
    batch_limit: int = DEFAULT_BATCH_LIMIT  # rows per seeding insert
    log_types: List[str] = field(default_factory=lambda: list(DEFAULT_LOG_TYPES))
    log_restrictions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LOG_RESTRICTIONS))
    use_rc_patrol: bool = True
    miser_mode: bool = False
    feed_classes: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FEED_CLASSES))
    group_permissions: Dict[str, List[str]] = field(
        default_factory=lambda: {g: list(r) for g, r in DEFAULT_GROUP_PERMISSIONS.items()}
    )
    duplicate_log_type: str = "upload"
    associated_rev_field: str = "associated_rev_id"
    cache_key_prefix: str = "feedrebuild"
    db_path: Path = Path("data/wiki.db")
    redis_url: Optional[str] = None

    @property
    def seedable_log_types(self) -> List[str]:
        """Log types that go into the feed: all types minus restricted ones."""
        return [t for t in self.log_types if t not in self.log_restrictions]

    @property
    def flags_autopatrol(self) -> bool:
        return self.use_rc_patrol and not self.miser_mode

    @property
    def max_age_days(self) -> float:
        return self.max_age / 24 / 3600

    def with_overrides(self, **overrides) -> "RebuildConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> "RebuildConfig":
        """Build a config from FEEDREBUILD_* variables, loading .env first."""
        load_env()
        defaults = cls()
        db_path = _env("DB_PATH")
        return cls(
            max_age=_env_int("MAX_AGE", defaults.max_age),
            batch_limit=_env_int("BATCH_LIMIT", defaults.batch_limit),
            log_types=_env_list("LOG_TYPES", defaults.log_types),
            log_restrictions=_env_json("LOG_RESTRICTIONS", defaults.log_restrictions),
            use_rc_patrol=_env_bool("USE_RC_PATROL", defaults.use_rc_patrol),
            miser_mode=_env_bool("MISER_MODE", defaults.miser_mode),
            feed_classes=_env_json("FEED_CLASSES", defaults.feed_classes),
            group_permissions=_env_json("GROUP_PERMISSIONS", defaults.group_permissions),
            duplicate_log_type=_env("DUPLICATE_LOG_TYPE") or defaults.duplicate_log_type,
            associated_rev_field=_env("ASSOCIATED_REV_FIELD") or defaults.associated_rev_field,
            cache_key_prefix=_env("CACHE_KEY_PREFIX") or defaults.cache_key_prefix,
            db_path=Path(db_path) if db_path else defaults.db_path,
            redis_url=os.getenv("REDIS_URL") or None,
        )
