"""
Install step — put a release binary on the PATH and check it runs.

Mirrors what the Homebrew formula does:

    bin.install Dir["gitai-*"].first => "gitai"
    assert_match "gitai", shell_output("#{bin}/gitai --help")

plus the formula text itself, rendered from the artifact table.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from gitai.core.services.release import (
    BINARY_NAME,
    HOMEPAGE,
    artifact_table,
)

logger = logging.getLogger(__name__)

FORMULA_DESC = "AI-powered Git commit message generator using local Ollama models"
SELF_TEST_MARKER = "gitai"

CAVEATS = """\
GitAI has been installed!

Before using GitAI, make sure to:
1. Start Ollama: ollama serve
2. Pull an AI model: ollama pull qwen2.5-coder:7b

Get started:
  cd your-git-repository
  gitai commit

Configuration:
  gitai config --init
"""


class InstallError(Exception):
    """The artifact could not be installed."""


@dataclass
class SelfTestResult:
    ok: bool
    output: str = ""
    error: str = ""

    def to_dict(self) -> dict:
        return {"ok": self.ok, "output": self.output, "error": self.error}


# ── Install ─────────────────────────────────────────────────────


def find_artifact(source: Path) -> Path:
    """Resolve ``source`` to one downloaded binary.

    A directory yields its first ``gitai-*`` file in sorted order.
    """
    if source.is_file():
        return source
    if source.is_dir():
        matches = sorted(p for p in source.glob(f"{BINARY_NAME}-*") if p.is_file())
        if matches:
            return matches[0]
        raise InstallError(f"No {BINARY_NAME}-* artifact found in {source}")
    raise InstallError(f"Artifact not found: {source}")


def install_artifact(source: Path, bin_dir: Path, name: str = BINARY_NAME) -> Path:
    """Copy the artifact to ``bin_dir/name`` with mode 0755.

    Overwrites a previous install. Returns the installed path.
    """
    artifact = find_artifact(source)
    target = bin_dir / name

    try:
        bin_dir.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f".{name}.tmp")
        shutil.copyfile(artifact, tmp)
        os.chmod(tmp, 0o755)
        os.replace(tmp, target)
    except OSError as e:
        raise InstallError(f"Failed to install {artifact.name} to {target}: {e}") from e

    logger.info("Installed %s → %s", artifact.name, target)
    return target


# ── Self-test ───────────────────────────────────────────────────


def self_test(binary: Path, timeout: int = 30) -> SelfTestResult:
    """Run ``<binary> --help`` and look for ``gitai`` in the output."""
    try:
        result = subprocess.run(
            [str(binary), "--help"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return SelfTestResult(ok=False, error=f"{binary} not found")
    except PermissionError:
        return SelfTestResult(ok=False, error=f"{binary} is not executable")
    except subprocess.TimeoutExpired:
        return SelfTestResult(ok=False, error=f"{binary} --help timed out after {timeout}s")

    output = result.stdout + result.stderr
    if result.returncode != 0:
        return SelfTestResult(
            ok=False,
            output=output,
            error=f"{binary} --help exited with status {result.returncode}",
        )
    if SELF_TEST_MARKER not in output:
        return SelfTestResult(
            ok=False,
            output=output,
            error=f"'{SELF_TEST_MARKER}' not found in --help output",
        )
    return SelfTestResult(ok=True, output=output)


# ── Formula ─────────────────────────────────────────────────────


def render_formula(version: str, checksums: dict[str, str] | None = None) -> str:
    """Render the Homebrew formula for ``version``.

    Artifacts without a known checksum get placeholder digests.
    """
    version = version.removeprefix("v")
    by_platform = {(a.os, a.arch): a for a in artifact_table(version, checksums)}

    def branch(os_name: str) -> list[str]:
        arm = by_platform[(os_name, "arm64")]
        intel = by_platform[(os_name, "amd64")]
        return [
            "    if Hardware::CPU.arm?",
            f'      url "{arm.url}"',
            f'      sha256 "{arm.sha256}"',
            "    else",
            f'      url "{intel.url}"',
            f'      sha256 "{intel.sha256}"',
            "    end",
        ]

    caveats = "\n".join(f"      {ln}" if ln else "" for ln in CAVEATS.rstrip("\n").splitlines())

    lines = [
        "class Gitai < Formula",
        f'  desc "{FORMULA_DESC}"',
        f'  homepage "{HOMEPAGE}"',
        f'  version "{version}"',
        "",
        "  on_macos do",
        *branch("darwin"),
        "  end",
        "",
        "  on_linux do",
        *branch("linux"),
        "  end",
        "",
        '  depends_on "ollama"',
        "",
        "  def install",
        f'    bin.install Dir["{BINARY_NAME}-*"].first => "{BINARY_NAME}"',
        "  end",
        "",
        "  test do",
        f'    assert_match "{SELF_TEST_MARKER}", shell_output("#{{bin}}/{BINARY_NAME} --help")',
        "  end",
        "",
        "  def caveats",
        "    <<~EOS",
        caveats,
        "    EOS",
        "  end",
        "end",
    ]
    return "\n".join(lines) + "\n"
