from typing import List

from .config import RebuildConfig


def _is_non_empty_str(v) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_config(config: RebuildConfig) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    if not isinstance(config.max_age, int) or config.max_age <= 0:
        errors.append("max_age must be a positive number of seconds")

    if not isinstance(config.batch_limit, int) or config.batch_limit <= 0:
        errors.append("batch_limit must be a positive integer")

    for t in config.log_types:
        if not isinstance(t, str):
            errors.append(f"log type {t!r} must be a string")

    for t, right in config.log_restrictions.items():
        if not _is_non_empty_str(right):
            errors.append(f"log restriction for '{t}' must name a right")

    for group, rights in config.group_permissions.items():
        if not _is_non_empty_str(group):
            errors.append("group names must be non-empty strings")
        if not isinstance(rights, list) or not all(_is_non_empty_str(r) for r in rights):
            errors.append(f"rights for group '{group}' must be a list of non-empty strings")

    for feed in config.feed_classes:
        if not _is_non_empty_str(feed):
            errors.append("feed names must be non-empty strings")

    if not _is_non_empty_str(config.duplicate_log_type):
        errors.append("duplicate_log_type must be a non-empty string")

    if not _is_non_empty_str(config.associated_rev_field):
        errors.append("associated_rev_field must be a non-empty string")

    if config.redis_url is not None and not config.redis_url.startswith(("redis://", "rediss://", "unix://")):
        errors.append("redis_url must use the redis://, rediss:// or unix:// scheme")

    return errors
