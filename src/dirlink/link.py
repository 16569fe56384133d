from __future__ import annotations

"""Public entry points: create a directory link, reconciling the destination."""

import logging
from typing import Optional

from .engine import reconcile, run_async, run_sync
from .errors import SamePathError
from .fs import FileSystem
from .models import LinkOptions, LinkRequest, LinkResult
from .paths import PathInput, resolve_path, same_path
from .probe import LinkModeProber, get_default_prober

logger = logging.getLogger(__name__)


def build_request(
    target: PathInput,
    link_path: PathInput,
    *,
    overwrite: bool = True,
    force_true_symlink: bool = False,
) -> LinkRequest:
    """Canonicalise both paths and refuse a link onto its own target."""

    resolved_target = resolve_path(target)
    resolved_link = resolve_path(link_path)
    if same_path(resolved_target, resolved_link):
        raise SamePathError(resolved_target)
    return LinkRequest(
        target=resolved_target,
        link_path=resolved_link,
        options=LinkOptions(overwrite=overwrite, force_true_symlink=force_true_symlink),
    )


def create_directory_link_sync(
    target: PathInput,
    link_path: PathInput,
    *,
    overwrite: bool = True,
    force_true_symlink: bool = False,
    prober: Optional[LinkModeProber] = None,
    filesystem: Optional[FileSystem] = None,
) -> LinkResult:
    """Make ``link_path`` a link to the directory ``target``.

    Missing parents of ``link_path`` are created, a link pointing elsewhere
    is replaced and a file or directory in the way is renamed to
    ``.ignored_<name>`` (reported in :attr:`LinkResult.warning`). With
    ``overwrite=False`` nothing existing is touched and the original
    ``FileExistsError`` is raised instead. A link that already points at
    ``target`` is left alone and reported as ``reused``.

    ``force_true_symlink=True`` refuses the junction fallback on Windows.
    """

    request = build_request(
        target, link_path, overwrite=overwrite, force_true_symlink=force_true_symlink
    )
    steps = reconcile(request, prober or get_default_prober())
    return run_sync(steps, filesystem or FileSystem())


async def create_directory_link(
    target: PathInput,
    link_path: PathInput,
    *,
    overwrite: bool = True,
    force_true_symlink: bool = False,
    prober: Optional[LinkModeProber] = None,
    filesystem: Optional[FileSystem] = None,
) -> LinkResult:
    """Asynchronous twin of :func:`create_directory_link_sync`."""

    request = build_request(
        target, link_path, overwrite=overwrite, force_true_symlink=force_true_symlink
    )
    steps = reconcile(request, prober or get_default_prober())
    return await run_async(steps, filesystem or FileSystem())


__all__ = ["build_request", "create_directory_link", "create_directory_link_sync"]
