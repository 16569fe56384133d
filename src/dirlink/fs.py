from __future__ import annotations

"""Filesystem primitives used by the link engine.

Every method maps onto one (or, for :meth:`FileSystem.move_replacing`, a
short sequence of) system calls and lets ``OSError`` propagate with its errno
intact. The engine interprets failures; this layer never does.
"""

import errno
import logging
import os
import shutil
from typing import Any, NamedTuple, Tuple

from .paths import IS_WINDOWS

if IS_WINDOWS:  # pragma: no cover - Windows-specific
    import _winapi

logger = logging.getLogger(__name__)

# Errors os.replace() raises when something already sits at the destination.
_DESTINATION_BLOCKED = frozenset(
    {errno.EEXIST, errno.ENOTEMPTY, errno.EISDIR, errno.ENOTDIR, errno.EPERM, errno.EACCES}
)


class Operation(NamedTuple):
    """A single :class:`FileSystem` call requested by the engine."""

    name: str
    args: Tuple[str, ...]

    def apply(self, filesystem: "FileSystem") -> Any:
        return getattr(filesystem, self.name)(*self.args)


def _is_junction(path: str) -> bool:
    isjunction = getattr(os.path, "isjunction", None)
    return bool(isjunction and isjunction(path))


class FileSystem:
    """Blocking filesystem operations. Subclass to simulate platforms or races."""

    def create_symlink(self, target: str, link_path: str) -> None:
        os.symlink(target, link_path, target_is_directory=True)

    def create_junction(self, target: str, link_path: str) -> None:
        if not IS_WINDOWS:
            raise OSError(errno.ENOTSUP, "Directory junctions are only available on Windows", link_path)
        _winapi.CreateJunction(target.rstrip("\\/"), link_path)  # pragma: no cover - Windows-specific

    def read_link(self, path: str) -> str:
        return os.readlink(path)

    def make_directories(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def unlink(self, path: str) -> None:
        os.unlink(path)

    def remove_entry(self, path: str) -> None:
        """Remove a file, link or directory tree. Absent paths are ignored."""

        try:
            if os.path.isdir(path) and not os.path.islink(path) and not _is_junction(path):
                shutil.rmtree(path)
            else:
                os.unlink(path)
        except FileNotFoundError:
            logger.debug("⏭️ Already gone: %s", path)

    def move_replacing(self, source: str, destination: str) -> None:
        """Rename ``source`` to ``destination``, replacing whatever is there.

        Raises ``FileNotFoundError`` when ``source`` no longer exists.
        """

        try:
            os.replace(source, destination)
            return
        except OSError as exc:
            if exc.errno not in _DESTINATION_BLOCKED or not os.path.lexists(destination):
                raise
        logger.debug("🧹 Clearing previous %s", destination)
        self.remove_entry(destination)
        os.replace(source, destination)


__all__ = ["FileSystem", "Operation"]
