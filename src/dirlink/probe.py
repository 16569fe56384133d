from __future__ import annotations

"""Decide between true symlinks and NTFS junctions.

Unprivileged Windows users (Developer Mode off) may not create symbolic
links but can always create directory junctions. A :class:`LinkModeProber`
with the ``MUST_PROBE`` capability tries a true symlink first and, on a
permission error, switches to junctions for every later call. Elsewhere
true symlinks are always used.
"""

import logging
import os
import re
from enum import Enum
from functools import lru_cache
from typing import Any, Generator, Optional

from .config import Config, get_config
from .errors import is_permission_error
from .fs import Operation
from .paths import IS_WINDOWS, junction_target, symlink_target

logger = logging.getLogger(__name__)


class LinkCapability(Enum):
    MUST_PROBE = "probe"
    TRUE_SYMLINK_ONLY = "symlink"
    JUNCTION_ONLY = "junction"


class LinkMode(Enum):
    UNPROBED = "unprobed"
    TRUE_SYMLINK = "symlink"
    JUNCTION = "junction"


def detect_capability(is_windows: bool = IS_WINDOWS, ostype: Optional[str] = None) -> LinkCapability:
    """Return the capability of the running platform."""

    if ostype is None:
        ostype = os.getenv("OSTYPE", "")
    if is_windows or re.fullmatch(r"msys|cygwin", ostype):
        return LinkCapability.MUST_PROBE
    return LinkCapability.TRUE_SYMLINK_ONLY


def capability_from_config(config: Config) -> LinkCapability:
    if config.capability == "auto":
        return detect_capability()
    return LinkCapability(config.capability)


class LinkModeProber:
    """Remembers which kind of link the platform lets this process create."""

    def __init__(self, capability: Optional[LinkCapability] = None):
        self.capability = capability or detect_capability()
        self.mode = LinkMode.UNPROBED

    def __repr__(self) -> str:
        return f"LinkModeProber(capability={self.capability.name}, mode={self.mode.name})"

    def reset(self) -> None:
        self.mode = LinkMode.UNPROBED

    def resolve_mode(self, force_true_symlink: bool = False) -> LinkMode:
        if force_true_symlink or self.capability is LinkCapability.TRUE_SYMLINK_ONLY:
            return LinkMode.TRUE_SYMLINK
        if self.capability is LinkCapability.JUNCTION_ONLY:
            return LinkMode.JUNCTION
        return self.mode

    def create_link(
        self,
        target: str,
        link_path: str,
        force_true_symlink: bool = False,
    ) -> Generator[Operation, Any, LinkMode]:
        """Yield the operations creating a link to ``target`` at ``link_path``.

        ``target`` and ``link_path`` must already be canonical. Returns the
        mode that was used. Errors other than the probing permission error
        are thrown back out unchanged.
        """

        mode = self.resolve_mode(force_true_symlink)
        if mode is LinkMode.JUNCTION:
            yield Operation("create_junction", (junction_target(target), link_path))
            return mode

        try:
            yield Operation("create_symlink", (symlink_target(target, link_path), link_path))
        except OSError as exc:
            if mode is not LinkMode.UNPROBED or not is_permission_error(exc):
                raise
            logger.info("🔒 Symlinks not permitted (%s), falling back to NTFS junctions", exc)
            yield Operation("create_junction", (junction_target(target), link_path))
            self.mode = LinkMode.JUNCTION
            return LinkMode.JUNCTION

        if mode is LinkMode.UNPROBED:
            logger.debug("🔓 Symlinks permitted, skipping probe from now on")
            self.mode = LinkMode.TRUE_SYMLINK
        return LinkMode.TRUE_SYMLINK


@lru_cache(maxsize=1)
def get_default_prober() -> LinkModeProber:
    """Return the process-wide prober built from :func:`get_config`."""
    return LinkModeProber(capability_from_config(get_config()))


__all__ = [
    "LinkCapability",
    "LinkMode",
    "LinkModeProber",
    "capability_from_config",
    "detect_capability",
    "get_default_prober",
]
