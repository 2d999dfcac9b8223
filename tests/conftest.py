"""Shared test fixtures and configuration."""

import subprocess
import tempfile
from pathlib import Path

import pytest

from hunkstage.config import ENV_OVERRIDES


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run async tests under asyncio only; the runner uses asyncio subprocesses."""
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's ~/.hunkstage and HUNKSTAGE_* variables out of tests."""
    config_dir = tmp_path / "hunkstage-home"
    monkeypatch.setattr("hunkstage.config._CONFIG_DIR", config_dir)
    for env_var in ENV_OVERRIDES.values():
        monkeypatch.delenv(env_var, raising=False)
    return config_dir


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def git(repo: Path, *args: str) -> str:
    """Run a git command synchronously for test setup."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def git_repo(temp_dir):
    """Create a repository with two committed files, A.txt and B.txt."""
    repo = temp_dir / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "core.autocrlf", "false")
    (repo / "A.txt").write_text("".join(f"line {i}\n" for i in range(1, 11)))
    (repo / "B.txt").write_text("alpha\nbeta\ngamma\n")
    git(repo, "add", "A.txt", "B.txt")
    git(repo, "commit", "-q", "-m", "Initial commit")
    return repo


@pytest.fixture
def sample_modified_diff():
    """Diff of a modified file with two hunks."""
    return """diff --git a/src/main.py b/src/main.py
index 1234567..abcdefg 100644
--- a/src/main.py
+++ b/src/main.py
@@ -10,5 +10,7 @@ def main():
     print("Hello")
+    print("World")
+    print("!")
     return 0
 
 
 def other():
@@ -20,2 +22,3 @@ def helper():
     pass
-    return False
+    # New comment
+    return True
"""
