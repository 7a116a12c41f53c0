"""
Release artifacts — which prebuilt binary belongs to which platform.

A release publishes one binary per (os, arch) plus a ``checksums.txt``
in ``sha256sum`` format. The Homebrew formula covers four of them:

    darwin/arm64   darwin/amd64   linux/arm64   linux/amd64

The self-updater additionally knows the Windows ``.exe`` build.
"""

from __future__ import annotations

import hashlib
import logging
import platform
from pathlib import Path

from gitai.core.models.release import ReleaseArtifact

logger = logging.getLogger(__name__)

REPO_OWNER = "xyue92"
REPO_NAME = "gitai"
HOMEPAGE = f"https://github.com/{REPO_OWNER}/{REPO_NAME}"
DOWNLOAD_BASE = f"{HOMEPAGE}/releases/download"
BINARY_NAME = "gitai"
CHECKSUMS_FILE = "checksums.txt"

FORMULA_PLATFORMS: tuple[tuple[str, str], ...] = (
    ("darwin", "arm64"),
    ("darwin", "amd64"),
    ("linux", "arm64"),
    ("linux", "amd64"),
)

SUPPORTED_PLATFORMS = frozenset(FORMULA_PLATFORMS) | {("windows", "amd64")}

_OS_MAP = {
    "darwin": "darwin",
    "macos": "darwin",
    "linux": "linux",
    "windows": "windows",
    "win32": "windows",
}

_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv8": "arm64",
    "armv8l": "arm64",
}


class UnsupportedPlatformError(Exception):
    """No artifact is published for the requested platform."""


class ChecksumMismatchError(Exception):
    """A downloaded file does not match its published digest."""

    def __init__(self, name: str, expected: str, actual: str) -> None:
        super().__init__(f"checksum mismatch for {name}: expected {expected}, got {actual}")
        self.name = name
        self.expected = expected
        self.actual = actual


# ═══════════════════════════════════════════════════════════════════
#  Platform resolution
# ═══════════════════════════════════════════════════════════════════


def normalize_os(system: str | None = None) -> str:
    """Release OS name for ``system`` (default: this machine)."""
    raw = (system or platform.system()).lower()
    return _OS_MAP.get(raw, raw)


def normalize_arch(machine: str | None = None) -> str:
    """Release arch name for ``machine`` (default: this machine)."""
    raw = (machine or platform.machine()).lower()
    return _ARCH_MAP.get(raw, raw)


def arch_family(machine: str | None = None) -> str:
    """ARM vs non-ARM, the split the formula makes with ``Hardware::CPU.arm?``."""
    raw = (machine or platform.machine()).lower()
    return "arm64" if raw.startswith(("arm", "aarch")) else "amd64"


def artifact_name(os_name: str, arch: str) -> str:
    name = f"{BINARY_NAME}-{os_name}-{arch}"
    if os_name == "windows":
        name += ".exe"
    return name


def release_tag(version: str) -> str:
    return version if version.startswith("v") else f"v{version}"


def download_url(version: str, name: str) -> str:
    return f"{DOWNLOAD_BASE}/{release_tag(version)}/{name}"


def checksum_placeholder(os_name: str, arch: str) -> str:
    """Placeholder digest used in the formula before checksums exist."""
    if os_name == "darwin":
        return f"PUT_SHA256_HERE_FOR_{arch.upper()}"
    return f"PUT_SHA256_HERE_FOR_{os_name.upper()}_{arch.upper()}"


def select_artifact(
    version: str,
    os_name: str | None = None,
    arch: str | None = None,
    checksums: dict[str, str] | None = None,
    *,
    strict: bool = False,
) -> ReleaseArtifact:
    """Return the single artifact for a platform.

    By default the CPU is classified by family like the formula does, so
    every macOS and Linux host gets one of the four formula entries.
    With ``strict`` only known machine names are accepted, for callers
    that execute the binary on this host.

    Args:
        version: Release version, with or without the ``v`` prefix.
        os_name: Target OS (default: this machine).
        arch: Target CPU architecture (default: this machine).
        checksums: ``{artifact name: sha256}``; placeholders if absent.
        strict: Reject machine names outside the known arch table.

    Raises:
        UnsupportedPlatformError: No binary is published for the pair.
    """
    os_name = normalize_os(os_name)
    arch = normalize_arch(arch) if strict else arch_family(arch)

    if (os_name, arch) not in SUPPORTED_PLATFORMS:
        supported = ", ".join(f"{o}/{a}" for o, a in sorted(SUPPORTED_PLATFORMS))
        raise UnsupportedPlatformError(
            f"No gitai binary for {os_name}/{arch}. Supported: {supported}"
        )

    name = artifact_name(os_name, arch)
    digest = (checksums or {}).get(name) or checksum_placeholder(os_name, arch)
    return ReleaseArtifact(
        os=os_name,
        arch=arch,
        name=name,
        url=download_url(version, name),
        sha256=digest,
    )


def artifact_table(
    version: str,
    checksums: dict[str, str] | None = None,
) -> list[ReleaseArtifact]:
    """The four formula artifacts for ``version``."""
    return [select_artifact(version, o, a, checksums) for o, a in FORMULA_PLATFORMS]


# ═══════════════════════════════════════════════════════════════════
#  Checksums
# ═══════════════════════════════════════════════════════════════════


def parse_checksums(text: str) -> dict[str, str]:
    """Parse ``sha256sum`` output into ``{file name: hex digest}``."""
    result: dict[str, str] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        digest, name = parts[0].lower(), parts[1].lstrip("*")
        result[name] = digest
    return result


def file_sha256(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_checksum(path: Path, expected: str) -> None:
    """Raise ChecksumMismatchError unless ``path`` hashes to ``expected``."""
    actual = file_sha256(path)
    if actual != expected.lower():
        raise ChecksumMismatchError(path.name, expected, actual)
    logger.debug("Checksum OK for %s", path.name)
