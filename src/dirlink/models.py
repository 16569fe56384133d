from __future__ import annotations

"""Request, option and result containers for link creation."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class LinkOptions:
    overwrite: bool = True
    force_true_symlink: bool = False


@dataclass(frozen=True)
class LinkRequest:
    """A canonicalised ``(target, link_path)`` pair plus its options."""

    target: str
    link_path: str
    options: LinkOptions = field(default_factory=LinkOptions)


@dataclass(frozen=True)
class LinkResult:
    reused: bool
    warning: Optional[str] = None


__all__ = ["LinkOptions", "LinkRequest", "LinkResult"]
