from __future__ import annotations

import errno
import os

import pytest

from conftest import NonDeveloperModeFileSystem, RecordingFileSystem
from dirlink import LinkCapability, LinkMode, LinkModeProber, create_directory_link_sync
from dirlink.config import Config
from dirlink.probe import capability_from_config, detect_capability, get_default_prober

needs_symlinks = pytest.mark.skipif(os.name == "nt", reason="needs unprivileged symlinks")


@pytest.mark.parametrize(
    "is_windows, ostype, expected",
    [
        (True, "", LinkCapability.MUST_PROBE),
        (False, "msys", LinkCapability.MUST_PROBE),
        (False, "cygwin", LinkCapability.MUST_PROBE),
        (False, "linux-gnu", LinkCapability.TRUE_SYMLINK_ONLY),
        (False, "", LinkCapability.TRUE_SYMLINK_ONLY),
    ],
)
def test_detect_capability(is_windows, ostype, expected):
    assert detect_capability(is_windows=is_windows, ostype=ostype) is expected


def test_capability_from_config():
    assert capability_from_config(Config("junction", True, "INFO")) is LinkCapability.JUNCTION_ONLY
    assert capability_from_config(Config("probe", True, "INFO")) is LinkCapability.MUST_PROBE
    assert capability_from_config(Config("auto", True, "INFO")) is detect_capability()


def test_default_prober_follows_config(monkeypatch):
    monkeypatch.setenv("DIRLINK_CAPABILITY", "junction")

    prober = get_default_prober()

    assert prober.capability is LinkCapability.JUNCTION_ONLY
    assert get_default_prober() is prober


def test_resolve_mode():
    assert LinkModeProber(LinkCapability.TRUE_SYMLINK_ONLY).resolve_mode() is LinkMode.TRUE_SYMLINK
    assert LinkModeProber(LinkCapability.JUNCTION_ONLY).resolve_mode() is LinkMode.JUNCTION
    assert LinkModeProber(LinkCapability.JUNCTION_ONLY).resolve_mode(True) is LinkMode.TRUE_SYMLINK

    probing = LinkModeProber(LinkCapability.MUST_PROBE)
    assert probing.resolve_mode() is LinkMode.UNPROBED
    probing.mode = LinkMode.JUNCTION
    assert probing.resolve_mode() is LinkMode.JUNCTION
    assert probing.resolve_mode(force_true_symlink=True) is LinkMode.TRUE_SYMLINK
    probing.reset()
    assert probing.mode is LinkMode.UNPROBED


@needs_symlinks
def test_probe_falls_back_to_junction_once(workdir, probing_prober):
    (workdir / "src").mkdir()
    filesystem = NonDeveloperModeFileSystem()

    first = create_directory_link_sync("src", "dest/subdir", prober=probing_prober, filesystem=filesystem)

    assert first.reused is False
    assert probing_prober.mode is LinkMode.JUNCTION
    stored = os.readlink("dest/subdir")
    assert os.path.isabs(stored)
    assert stored.endswith(os.sep)
    assert os.path.realpath("dest/subdir") == os.path.realpath("src")

    symlink_attempts = filesystem.names().count("create_symlink")
    second = create_directory_link_sync("src", "dest/subdir", prober=probing_prober, filesystem=filesystem)

    assert second.reused is True
    assert filesystem.names().count("create_symlink") == symlink_attempts


@needs_symlinks
def test_probe_remembers_true_symlinks(workdir, probing_prober):
    (workdir / "src").mkdir()

    create_directory_link_sync("src", "dest", prober=probing_prober)

    assert probing_prober.mode is LinkMode.TRUE_SYMLINK
    assert os.readlink("dest") == "src"


class FlakyDiskFileSystem(RecordingFileSystem):
    def create_symlink(self, target: str, link_path: str) -> None:
        raise OSError(errno.EIO, "Input/output error", link_path)


def test_unrelated_probe_failure_leaves_mode_unprobed(workdir, probing_prober):
    with pytest.raises(OSError) as excinfo:
        create_directory_link_sync("src", "dest", prober=probing_prober, filesystem=FlakyDiskFileSystem())

    assert excinfo.value.errno == errno.EIO
    assert probing_prober.mode is LinkMode.UNPROBED


@needs_symlinks
def test_forced_symlink_never_falls_back(workdir, probing_prober):
    (workdir / "src").mkdir()
    filesystem = NonDeveloperModeFileSystem()

    with pytest.raises(PermissionError) as excinfo:
        create_directory_link_sync(
            "src", "dest", force_true_symlink=True, prober=probing_prober, filesystem=filesystem
        )

    assert excinfo.value.errno == errno.EPERM
    assert not os.path.lexists("dest")
    assert "create_junction" not in filesystem.names()
    assert probing_prober.mode is LinkMode.UNPROBED


@needs_symlinks
def test_forced_symlink_is_reused(workdir, prober):
    (workdir / "src").mkdir()
    (workdir / "src" / "file.json").write_text("{}")

    create_directory_link_sync("src", "dest/subdir", force_true_symlink=True, prober=prober)
    result = create_directory_link_sync("src", "dest/subdir", force_true_symlink=True, prober=prober)

    assert result.reused is True
    assert (workdir / "dest" / "subdir" / "file.json").read_text() == "{}"


@needs_symlinks
def test_junction_created_earlier_is_reused_by_symlink_mode(workdir):
    (workdir / "src").mkdir()
    junctions = LinkModeProber(LinkCapability.JUNCTION_ONLY)
    symlinks = LinkModeProber(LinkCapability.TRUE_SYMLINK_ONLY)

    create_directory_link_sync("src", "dest", prober=junctions, filesystem=NonDeveloperModeFileSystem())
    result = create_directory_link_sync("src", "dest", overwrite=False, prober=symlinks)

    assert result.reused is True
    assert os.path.isabs(os.readlink("dest"))


@needs_symlinks
def test_symlink_created_earlier_is_reused_by_junction_mode(workdir):
    (workdir / "src").mkdir()
    junctions = LinkModeProber(LinkCapability.JUNCTION_ONLY)
    symlinks = LinkModeProber(LinkCapability.TRUE_SYMLINK_ONLY)

    create_directory_link_sync("src", "dest/subdir", prober=symlinks)
    result = create_directory_link_sync(
        "src", "dest/subdir", prober=junctions, filesystem=NonDeveloperModeFileSystem()
    )

    assert result.reused is True
    assert not os.path.isabs(os.readlink("dest/subdir"))


def test_junctions_unavailable_off_windows(workdir):
    if os.name == "nt":
        pytest.skip("junctions exist on Windows")
    (workdir / "src").mkdir()

    with pytest.raises(OSError) as excinfo:
        create_directory_link_sync("src", "dest", prober=LinkModeProber(LinkCapability.JUNCTION_ONLY))

    assert excinfo.value.errno == errno.ENOTSUP


class ReadOnlyDirectoryFileSystem(RecordingFileSystem):
    """Both kinds of link fail with EACCES, but only inside ``readonly/``."""

    def _check(self, link_path: str) -> None:
        if os.path.basename(os.path.dirname(link_path)) == "readonly":
            raise PermissionError(errno.EACCES, "Permission denied", link_path)

    def create_symlink(self, target: str, link_path: str) -> None:
        self._check(link_path)
        super().create_symlink(target, link_path)

    def create_junction(self, target: str, link_path: str) -> None:
        self._check(link_path)
        os.symlink(target, link_path, target_is_directory=True)


@needs_symlinks
def test_access_denied_does_not_switch_to_junctions(workdir, probing_prober):
    (workdir / "src").mkdir()
    (workdir / "readonly").mkdir()
    filesystem = ReadOnlyDirectoryFileSystem()

    with pytest.raises(PermissionError) as excinfo:
        create_directory_link_sync("src", "readonly/link", prober=probing_prober, filesystem=filesystem)

    assert excinfo.value.errno == errno.EACCES
    assert probing_prober.mode is LinkMode.UNPROBED

    create_directory_link_sync("src", "dest", prober=probing_prober, filesystem=filesystem)

    assert probing_prober.mode is LinkMode.TRUE_SYMLINK
    assert "create_junction" not in filesystem.names()
    assert not os.path.isabs(os.readlink("dest"))


class NoJunctionsEitherFileSystem(NonDeveloperModeFileSystem):
    def create_junction(self, target: str, link_path: str) -> None:
        raise OSError(errno.EIO, "Input/output error", link_path)


def test_failed_junction_fallback_is_fatal(workdir, probing_prober):
    (workdir / "src").mkdir()
    filesystem = NoJunctionsEitherFileSystem()

    with pytest.raises(OSError) as excinfo:
        create_directory_link_sync("src", "dest", prober=probing_prober, filesystem=filesystem)

    assert excinfo.value.errno == errno.EIO
    assert filesystem.names() == ["create_symlink", "create_junction"]
    assert probing_prober.mode is LinkMode.UNPROBED
    assert not os.path.lexists("dest")
