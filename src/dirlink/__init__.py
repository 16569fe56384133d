"""Idempotent directory links with NTFS junction fallback."""

from .errors import LinkError, SamePathError
from .link import create_directory_link, create_directory_link_sync
from .models import LinkOptions, LinkResult
from .probe import LinkCapability, LinkMode, LinkModeProber

__all__ = [
    "LinkCapability",
    "LinkError",
    "LinkMode",
    "LinkModeProber",
    "LinkOptions",
    "LinkResult",
    "SamePathError",
    "create_directory_link",
    "create_directory_link_sync",
]
