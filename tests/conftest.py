"""
Shared test fixtures and configuration.
"""

import shutil
import socket
import subprocess
import threading
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(repo: Path, *args: str) -> str:
    """Run git in ``repo`` and return stdout; fails the test on error."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Keep the user's config, env overrides and editor out of tests."""
    for var in ("GITAI_MODEL", "GITAI_OLLAMA_URL", "GITAI_LOG_LEVEL", "GITAI_LOG_FILE", "GITAI_LOG_FILE_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """An initialised repository on branch ``main`` with one commit."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "commit.gpgsign", "false")

    (repo / "README.md").write_text("# demo\n\nA small demo project.\n")
    git(repo, "add", "README.md")
    git(repo, "commit", "-q", "-m", "chore: initial commit")
    return repo


@pytest.fixture
def staged_repo(git_repo: Path) -> Path:
    """``git_repo`` with a new Python file staged."""
    src = git_repo / "app.py"
    src.write_text("def greet(name):\n    return f'hello {name}'\n")
    git(git_repo, "add", "app.py")
    return git_repo


@pytest.fixture
def hangup_server(monkeypatch: pytest.MonkeyPatch):
    """Base URL of a local server that reads each request and closes without replying."""
    for var in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(var, raising=False)

    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(4)
    srv.settimeout(0.2)
    stop = threading.Event()

    def serve():
        while not stop.is_set():
            try:
                conn, _ = srv.accept()
            except TimeoutError:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(5)
                try:
                    conn.recv(65536)
                except OSError:
                    pass

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{srv.getsockname()[1]}"
    stop.set()
    thread.join(timeout=5)
    srv.close()
