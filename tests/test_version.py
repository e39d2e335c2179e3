import subprocess
from unittest import mock

import pytest

from suimev import version


def _fake_git(outputs):
    def run(cmd, **kwargs):
        assert cmd[0] == "git"
        return subprocess.CompletedProcess(cmd, 0, stdout=outputs[cmd[1]].encode(), stderr=b"")

    return run


def test_clean_checkout():
    outputs = {"log": "abc1234,2024-01-02", "status": "", "rev-parse": "main\n"}
    with mock.patch("subprocess.run", side_effect=_fake_git(outputs)):
        assert version.get_git_commit() == "main-abc1234@2024-01-02"


def test_dirty_checkout():
    outputs = {"log": "abc1234,2024-01-02", "status": " M file.rs\n", "rev-parse": "dev\n"}
    with mock.patch("subprocess.run", side_effect=_fake_git(outputs)):
        assert version.build_version() == "dev-abc1234-dirty@2024-01-02"


def test_unexpected_log_output():
    outputs = {"log": "garbage", "status": "", "rev-parse": "main"}
    with mock.patch("subprocess.run", side_effect=_fake_git(outputs)):
        with pytest.raises(ValueError, match="Unexpected output format"):
            version.get_git_commit()


def test_missing_git_propagates():
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("git")):
        with pytest.raises(FileNotFoundError):
            version.build_version()