from __future__ import annotations

import errno
import os
from typing import List, Tuple

import pytest

from dirlink.config import get_config
from dirlink.fs import FileSystem
from dirlink.probe import LinkCapability, LinkModeProber, get_default_prober


class RecordingFileSystem(FileSystem):
    """Real filesystem that remembers every call made through it."""

    def __init__(self):
        self.calls: List[Tuple[str, Tuple[str, ...]]] = []

    def __getattribute__(self, name):
        attr = super().__getattribute__(name)
        if callable(attr) and not name.startswith("_") and name in FileSystem.__dict__:
            calls = super().__getattribute__("calls")

            def record(*args):
                calls.append((name, args))
                return attr(*args)

            return record
        return attr

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


class NonDeveloperModeFileSystem(RecordingFileSystem):
    """Emulates Windows without Developer Mode: only junctions may be created.

    Junctions are stood in for by absolute symlinks.
    """

    def create_symlink(self, target: str, link_path: str) -> None:
        raise PermissionError(
            errno.EPERM,
            "Non-junction symlinks are blocked to emulate Windows non-developer mode",
            link_path,
        )

    def create_junction(self, target: str, link_path: str) -> None:
        os.symlink(target, link_path, target_is_directory=True)


@pytest.fixture(autouse=True)
def _isolated_defaults(monkeypatch):
    for name in ("DIRLINK_CAPABILITY", "DIRLINK_OVERWRITE", "DIRLINK_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    get_default_prober.cache_clear()
    yield
    get_config.cache_clear()
    get_default_prober.cache_clear()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def prober() -> LinkModeProber:
    return LinkModeProber(LinkCapability.TRUE_SYMLINK_ONLY)


@pytest.fixture
def probing_prober() -> LinkModeProber:
    return LinkModeProber(LinkCapability.MUST_PROBE)
