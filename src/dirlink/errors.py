"""Exceptions and OSError classification used by the link engine."""
from __future__ import annotations

import errno
from typing import Optional

# Windows ERROR_PRIVILEGE_NOT_HELD, raised when SeCreateSymbolicLinkPrivilege is missing.
WINERROR_PRIVILEGE_NOT_HELD = 1314

_OCCUPIED_ERRNOS = frozenset({errno.EEXIST, errno.EISDIR})


class LinkError(Exception):
    """Base class for errors raised by dirlink itself."""


class SamePathError(LinkError, ValueError):
    """The link would point at itself."""

    code = "EINVAL"

    def __init__(self, path: str):
        super().__init__(f"Symlink path is the same as the target path ({path})")
        self.path = path


def error_code(exc: BaseException) -> Optional[str]:
    """Return the symbolic errno name (``"EEXIST"``, ``"ENOENT"``...) of ``exc``."""

    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code
    number = getattr(exc, "errno", None)
    if number is None:
        return None
    return errno.errorcode.get(number)


def is_permission_error(exc: OSError) -> bool:
    if getattr(exc, "winerror", None) == WINERROR_PRIVILEGE_NOT_HELD:
        return True
    return exc.errno == errno.EPERM


def is_missing(exc: OSError) -> bool:
    return exc.errno == errno.ENOENT


def is_occupied(exc: OSError) -> bool:
    return exc.errno in _OCCUPIED_ERRNOS


__all__ = [
    "LinkError",
    "SamePathError",
    "WINERROR_PRIVILEGE_NOT_HELD",
    "error_code",
    "is_missing",
    "is_occupied",
    "is_permission_error",
]
