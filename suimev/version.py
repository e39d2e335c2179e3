"""Build version string taken from the git checkout."""

from __future__ import annotations

import subprocess


def _git(*args: str) -> str:
    result = subprocess.run(["git", *args], capture_output=True, check=False)
    return result.stdout.decode("utf-8")


def get_git_commit() -> str:
    """Return `<branch>-<short commit>[-dirty]@<commit date>`."""
    parts = _git("log", "-1", "--pretty=format:%h,%ad", "--date=format:%Y-%m-%d").strip().split(",")
    if len(parts) != 2:
        raise ValueError("Unexpected output format")
    commit, date = parts

    dirty = "-dirty" if _git("status", "-s") else ""
    branch = _git("rev-parse", "--abbrev-ref", "HEAD").strip()
    return f"{branch}-{commit}{dirty}@{date}"


def build_version() -> str:
    return get_git_commit()