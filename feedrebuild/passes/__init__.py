"""The rebuild passes, in the order they must run."""

from .seed_revisions import seed_revisions
from .link_revisions import link_revisions
from .seed_logs import seed_logs
from .classify_roles import classify_roles
from .resolve_duplicates import resolve_duplicates

PASSES = [
    ("seed_revisions", seed_revisions),
    ("link_revisions", link_revisions),
    ("seed_logs", seed_logs),
    ("classify_roles", classify_roles),
    ("resolve_duplicates", resolve_duplicates),
]

__all__ = [
    "PASSES",
    "seed_revisions",
    "link_revisions",
    "seed_logs",
    "classify_roles",
    "resolve_duplicates",
]
