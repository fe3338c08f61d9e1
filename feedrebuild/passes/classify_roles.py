"""
Pass 4: flag bot and autopatrolled entries.

Responsibilities:
- Set is_bot on entries made by members of groups with the bot right.
- Set is_patrolled on entries made by members of groups with the
  autopatrol right, when patrolling is on and miser mode is off.

Invariant:
Both updates are set-based and idempotent; running the pass twice
leaves the same flags.
"""

from typing import List

from ..config import RebuildConfig
from ..database import FeedEntry
from ..roles import RoleLookup


def flag_entries_by(session, names: List[str], column) -> int:
    """Set `column` to true on every entry whose actor is in `names`."""
    if not names:
        return 0
    return (
        session.query(FeedEntry)
        .filter(FeedEntry.actor_name.in_(names))
        .update({column: True}, synchronize_session=False)
    )


def classify_roles(session, config: RebuildConfig, now, logger, roles: RoleLookup = None) -> int:
    """
    Apply bot and autopatrol flags.

    Returns:
        Number of entry updates applied across both flags
    """
    roles = roles or RoleLookup(config.group_permissions)
    updated = 0

    bot_groups = roles.groups_with_permission("bot")
    if bot_groups:
        logger.info("Flagging bot account edits...")
        bots = roles.members_of(session, bot_groups)
        if bots:
            updated += flag_entries_by(session, bots, FeedEntry.is_bot)
        else:
            logger.debug("No accounts in bot groups", groups=bot_groups)
    else:
        logger.debug("No groups grant the bot right")

    if not config.flags_autopatrol:
        logger.debug(
            "Autopatrol flagging disabled",
            use_rc_patrol=config.use_rc_patrol,
            miser_mode=config.miser_mode,
        )
        return updated

    patrol_groups = roles.groups_with_permission("autopatrol")
    if patrol_groups:
        logger.info("Flagging auto-patrolled edits...")
        patrollers = roles.members_of(session, patrol_groups)
        if patrollers:
            updated += flag_entries_by(session, patrollers, FeedEntry.is_patrolled)
        else:
            logger.debug("No accounts in autopatrol groups", groups=patrol_groups)

    return updated
