from __future__ import annotations

"""Reconcile a requested link with whatever currently sits at its path.

:func:`reconcile` is a generator: it yields :class:`~dirlink.fs.Operation`
values, receives their results through ``send()`` and their ``OSError``
through ``throw()``. :func:`run_sync` and :func:`run_async` execute those
operations, so both entry points share one state machine.

There is no locking. Each create/rename/unlink is assumed atomic at the OS
level and a lost race is simply observed as a new filesystem state on the
next loop iteration. Every path back to ``Attempt`` follows a mutation made
here or an observed concurrent mutation, so the loop needs no retry cap.
"""

import asyncio
import logging
import os
from enum import Enum
from typing import Any, Generator, Optional

from .errors import is_missing, is_occupied
from .fs import FileSystem, Operation
from .models import LinkRequest, LinkResult
from .paths import ignored_name, ignored_sibling, resolve_link_target, same_path
from .probe import LinkModeProber

logger = logging.getLogger(__name__)

Steps = Generator[Operation, Any, LinkResult]


class State(Enum):
    ATTEMPT = "attempt"
    PARENT_MISSING = "parent-missing"
    OCCUPIED = "occupied"
    FOREIGN_ENTRY = "foreign-entry"
    STALE_LINK = "stale-link"


def _annotate_parent_error(exc: OSError, request: LinkRequest) -> OSError:
    message = (
        f'Error while trying to symlink "{request.target}" to "{request.link_path}". '
        "The error happened while trying to create the parent directory for the symlink target. "
        f"Details: {exc.strerror or exc}"
    )
    # OSError(errno, ...) builds the matching subclass (PermissionError, ...).
    return OSError(exc.errno, message, exc.filename)


def _moved_warning(link_path: str) -> str:
    parent, name = os.path.split(link_path)
    return (
        "Symlink wanted name was occupied by directory or file. "
        f'Old entity moved: "{parent}{os.sep}{{{name} => {ignored_name(link_path)}}}".'
    )


def _removed_warning(link_path: str) -> str:
    parent, name = os.path.split(link_path)
    return (
        "Symlink wanted name was occupied by directory or file. "
        f'Old entity removed: "{parent}{os.sep}{{{name}}}".'
    )


def reconcile(request: LinkRequest, prober: LinkModeProber) -> Steps:
    """Drive ``request`` to a :class:`LinkResult` or raise the fatal ``OSError``."""

    target, link_path, options = request.target, request.link_path, request.options
    displaced_once = False
    parent_created = False
    mutated = False
    warning: Optional[str] = None
    occupancy_error: Optional[OSError] = None
    existing: Optional[str] = None
    state = State.ATTEMPT

    while True:
        if state is State.ATTEMPT:
            try:
                yield from prober.create_link(target, link_path, options.force_true_symlink)
            except OSError as exc:
                if is_missing(exc):
                    if parent_created:
                        # The parent exists now, so ENOENT has another cause.
                        raise
                    state = State.PARENT_MISSING
                elif is_occupied(exc):
                    occupancy_error = exc
                    state = State.OCCUPIED
                else:
                    raise
                continue
            logger.info("🔗 Linked %s → %s", link_path, target)
            return LinkResult(reused=False, warning=warning)

        if state is State.PARENT_MISSING:
            parent = os.path.dirname(link_path)
            logger.debug("📁 Creating parent directory: %s", parent)
            try:
                yield Operation("make_directories", (parent,))
            except OSError as exc:
                raise _annotate_parent_error(exc, request) from exc
            parent_created = True
            mutated = True
            state = State.ATTEMPT
            continue

        if state is State.OCCUPIED:
            try:
                existing = yield Operation("read_link", (link_path,))
            except OSError as exc:
                if is_missing(exc):
                    logger.debug("🏃 %s vanished before it could be inspected, retrying", link_path)
                    state = State.ATTEMPT
                    continue
                if not options.overwrite:
                    raise occupancy_error from None
                state = State.FOREIGN_ENTRY
                continue
            if same_path(resolve_link_target(link_path, existing), target):
                logger.debug("⏭️ Already linked: %s", link_path)
                return LinkResult(reused=not mutated, warning=warning)
            state = State.STALE_LINK
            continue

        if state is State.FOREIGN_ENTRY:
            if displaced_once:
                yield Operation("remove_entry", (link_path,))
                warning = _removed_warning(link_path)
            else:
                # Known race: if another caller displaced the occupant and
                # linked between our read_link and this rename, we move its
                # fresh link onto the .ignored_ sibling, replacing the entry
                # it parked there.
                try:
                    yield Operation("move_replacing", (link_path, ignored_sibling(link_path)))
                except OSError as exc:
                    if is_missing(exc):
                        raise occupancy_error from None
                    raise
                warning = _moved_warning(link_path)
                displaced_once = True
            mutated = True
            logger.warning("⚠️ %s", warning)
            state = State.ATTEMPT
            continue

        if state is State.STALE_LINK:
            if not options.overwrite:
                raise occupancy_error
            logger.info("♻️ Replacing stale link %s (was → %s)", link_path, existing)
            try:
                yield Operation("unlink", (link_path,))
            except OSError as exc:
                if not is_missing(exc):
                    raise
            mutated = True
            state = State.ATTEMPT
            continue


def run_sync(steps: Steps, filesystem: FileSystem) -> LinkResult:
    """Execute ``steps`` with blocking filesystem calls."""

    try:
        operation = next(steps)
        while True:
            try:
                result = operation.apply(filesystem)
            except OSError as exc:
                operation = steps.throw(exc)
            else:
                operation = steps.send(result)
    except StopIteration as stop:
        return stop.value


async def run_async(steps: Steps, filesystem: FileSystem) -> LinkResult:
    """Execute ``steps``, running each filesystem call in a worker thread."""

    try:
        operation = next(steps)
        while True:
            try:
                result = await asyncio.to_thread(operation.apply, filesystem)
            except OSError as exc:
                operation = steps.throw(exc)
            else:
                operation = steps.send(result)
    except StopIteration as stop:
        return stop.value


__all__ = ["State", "reconcile", "run_async", "run_sync"]
