"""
Self-updater — replace the running gitai binary with the latest release.

Flow:
    1. GET the latest release from the GitHub API
    2. compare its tag with the running version
    3. download the platform binary and ``checksums.txt``
    4. verify SHA-256, back up the current executable, swap in the new one
"""

from __future__ import annotations

import http.client
import json
import logging
import os
import shutil
import sys
import tempfile
import urllib.error
import urllib.request
from pathlib import Path

from pydantic import ValidationError

from gitai import __version__
from gitai.core.models.release import Release
from gitai.core.services.release import (
    BINARY_NAME,
    CHECKSUMS_FILE,
    REPO_NAME,
    REPO_OWNER,
    ChecksumMismatchError,
    UnsupportedPlatformError,
    download_url,
    parse_checksums,
    select_artifact,
    verify_checksum,
)

logger = logging.getLogger(__name__)

GITHUB_API_URL = f"https://api.github.com/repos/{REPO_OWNER}/{REPO_NAME}/releases/latest"
API_TIMEOUT = 30
DOWNLOAD_TIMEOUT = 300


class UpdateError(Exception):
    """Checking for or applying an update failed."""


def needs_update(current: str, latest: str) -> bool:
    """True when ``latest`` differs from ``current``.

    >>> needs_update("v1.0.0", "1.0.0")
    False
    >>> needs_update("dev", "v1.0.0")
    True
    """
    current = current.removeprefix("v")
    latest = latest.removeprefix("v")
    if current == "dev":
        return True
    return current != latest


def current_executable() -> Path:
    """Path of the installed gitai binary, symlinks resolved."""
    if getattr(sys, "frozen", False):
        exe = sys.executable
    else:
        exe = shutil.which(BINARY_NAME)
    if not exe:
        raise UpdateError(f"Cannot locate the installed {BINARY_NAME} executable")
    return Path(exe).resolve()


class Updater:
    """Checks GitHub for releases and installs them in place.

    Args:
        current_version: Running version, ``dev`` for source builds.
        executable: Binary to replace (default: the installed one).
        os_name / arch: Target platform (default: this machine).
    """

    def __init__(
        self,
        current_version: str = __version__,
        *,
        executable: Path | None = None,
        os_name: str | None = None,
        arch: str | None = None,
        api_url: str = GITHUB_API_URL,
    ) -> None:
        self.current_version = current_version
        self.executable = executable
        self.os_name = os_name
        self.arch = arch
        self.api_url = api_url

    # ── Check ───────────────────────────────────────────────────

    def check_for_update(self) -> tuple[Release, bool]:
        """Fetch the latest release; return it and whether it is newer."""
        req = urllib.request.Request(
            self.api_url,
            headers={
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": f"gitai/{__version__}",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=API_TIMEOUT) as resp:
                status = resp.status
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise UpdateError(f"GitHub API returned status {e.code}") from e
        except (urllib.error.URLError, TimeoutError) as e:
            raise UpdateError(f"Failed to check for updates: {e}") from e
        except (ConnectionError, http.client.HTTPException, OSError) as e:
            raise UpdateError(f"Failed to check for updates: connection dropped ({e})") from e

        if status != 200:
            raise UpdateError(f"GitHub API returned status {status}")

        try:
            release = Release.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise UpdateError(f"Failed to parse release info: {e}") from e

        newer = needs_update(self.current_version, release.tag_name)
        logger.info(
            "Latest release %s (running %s, update=%s)",
            release.tag_name, self.current_version, newer,
        )
        return release, newer

    # ── Apply ───────────────────────────────────────────────────

    def update(self, tag: str) -> Path:
        """Download ``tag`` for this platform and replace the executable.

        Returns the path that was replaced.
        """
        try:
            artifact = select_artifact(tag, self.os_name, self.arch, strict=True)
        except UnsupportedPlatformError as e:
            raise UpdateError(str(e)) from e

        target = self.executable.resolve() if self.executable else current_executable()

        with tempfile.TemporaryDirectory(prefix="gitai-update-") as tmp:
            tmp_dir = Path(tmp)
            binary = tmp_dir / artifact.name
            checksums = tmp_dir / CHECKSUMS_FILE

            self._download(artifact.url, binary, what="binary")
            self._download(download_url(tag, CHECKSUMS_FILE), checksums, what="checksums")

            expected = parse_checksums(checksums.read_text(encoding="utf-8")).get(artifact.name)
            if not expected:
                raise UpdateError(f"checksum not found for {artifact.name}")
            try:
                verify_checksum(binary, expected)
            except ChecksumMismatchError as e:
                raise UpdateError(f"checksum verification failed: {e}") from e

            self._replace(binary, target)

        logger.info("Updated %s to %s", target, tag)
        return target

    def _download(self, url: str, dest: Path, *, what: str) -> None:
        logger.debug("Downloading %s", url)
        req = urllib.request.Request(url, headers={"User-Agent": f"gitai/{__version__}"})
        try:
            with urllib.request.urlopen(req, timeout=DOWNLOAD_TIMEOUT) as resp, open(dest, "wb") as out:
                shutil.copyfileobj(resp, out)
        except urllib.error.HTTPError as e:
            raise UpdateError(f"failed to download {what}: status {e.code}") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise UpdateError(f"failed to download {what}: {e}") from e

    def _replace(self, new_binary: Path, target: Path) -> None:
        backup = target.with_name(target.name + ".backup")
        staged = target.with_name(f".{target.name}.new")

        try:
            shutil.copy2(target, backup)
        except OSError as e:
            raise UpdateError(f"failed to create backup: {e}") from e

        try:
            # os.replace only works within one filesystem; stage beside the target
            shutil.copyfile(new_binary, staged)
            os.chmod(staged, 0o755)
            os.replace(staged, target)
        except OSError as e:
            staged.unlink(missing_ok=True)
            os.replace(backup, target)
            raise UpdateError(f"failed to replace binary: {e}") from e

        backup.unlink(missing_ok=True)
