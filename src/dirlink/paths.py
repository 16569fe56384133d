from __future__ import annotations

"""Path canonicalisation and link-target encoding helpers."""

import os
from typing import Union

PathInput = Union[str, os.PathLike]

IS_WINDOWS = os.name == "nt"
IGNORED_PREFIX = ".ignored_"

# os.readlink() reports junction targets in NT namespace form on Windows.
_NT_PREFIXES = ("\\\\?\\", "\\??\\")


def _strip_nt_prefix(path: str) -> str:
    for prefix in _NT_PREFIXES:
        if path.startswith(prefix):
            rest = path[len(prefix):]
            if rest[:4].upper() == "UNC\\":
                return "\\\\" + rest[4:]
            return rest
    return path


def resolve_path(path: PathInput) -> str:
    """Return an absolute, normalised form of ``path`` without following links.

    Drive letters are upper-cased on Windows so that ``c:\\x`` and ``C:\\x``
    compare equal as strings.
    """

    resolved = os.path.abspath(_strip_nt_prefix(os.fspath(path)))
    if IS_WINDOWS and len(resolved) > 1 and resolved[1] == ":":
        resolved = resolved[0].upper() + resolved[1:]
    return resolved


def same_path(left: PathInput, right: PathInput) -> bool:
    return os.path.normcase(resolve_path(left)) == os.path.normcase(resolve_path(right))


def symlink_target(target: str, link_path: str) -> str:
    """Encode ``target`` relative to the directory holding ``link_path``."""

    try:
        return os.path.relpath(target, os.path.dirname(link_path))
    except ValueError:
        # Different drives on Windows have no relative path between them.
        return target


def junction_target(target: str) -> str:
    """Junctions cannot be relative: absolute path with a trailing separator."""

    return resolve_path(target).rstrip(os.sep) + os.sep


def resolve_link_target(link_path: str, stored: str) -> str:
    """Resolve the string stored in a link to the absolute location it names."""

    return resolve_path(os.path.join(os.path.dirname(link_path), _strip_nt_prefix(stored)))


def ignored_name(link_path: str, prefix: str = IGNORED_PREFIX) -> str:
    return f"{prefix}{os.path.basename(link_path)}"


def ignored_sibling(link_path: str, prefix: str = IGNORED_PREFIX) -> str:
    """Path next to ``link_path`` where a displaced occupant is parked."""

    return os.path.join(os.path.dirname(link_path), ignored_name(link_path, prefix))


__all__ = [
    "IGNORED_PREFIX",
    "IS_WINDOWS",
    "PathInput",
    "ignored_name",
    "ignored_sibling",
    "junction_target",
    "resolve_link_target",
    "resolve_path",
    "same_path",
    "symlink_target",
]
