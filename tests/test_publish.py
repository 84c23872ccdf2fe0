from __future__ import annotations

import shutil
import subprocess
from datetime import datetime, timezone

import pytest

from landing.publish import (
    NOTHING_MESSAGE,
    PUBLISHED_MESSAGE,
    CommandResult,
    GitPublisher,
    PublishError,
)


class ScriptedRunner:
    """Returns canned results per git subcommand and records the calls."""

    def __init__(self, **results: CommandResult) -> None:
        self.results = results
        self.calls: list[list[str]] = []

    def __call__(self, command):
        self.calls.append(list(command))
        return self.results.get(command[1], CommandResult(0, ""))


def _publisher(runner, **kwargs):
    return GitPublisher("/srv/site", runner=runner, **kwargs)


def test_publish_runs_add_commit_push():
    runner = ScriptedRunner()
    result = _publisher(runner, remote="upstream", branch="prod").publish()

    assert result.message == PUBLISHED_MESSAGE
    assert result.committed is True
    assert [call[1] for call in runner.calls] == ["add", "commit", "push"]
    assert runner.calls[0] == ["git", "add", "-A"]
    assert runner.calls[2] == ["git", "push", "upstream", "prod"]


def test_nothing_to_commit_is_success_without_push():
    runner = ScriptedRunner(commit=CommandResult(1, "On branch main\nnothing to commit, working tree clean"))
    result = _publisher(runner).publish()

    assert result.message == NOTHING_MESSAGE
    assert result.committed is False
    assert [call[1] for call in runner.calls] == ["add", "commit"]


@pytest.mark.parametrize("step", ["add", "commit", "push"])
def test_step_failures_raise_with_output(step):
    runner = ScriptedRunner(**{step: CommandResult(128, "fatal: something broke")})
    with pytest.raises(PublishError) as excinfo:
        _publisher(runner).publish()

    assert excinfo.value.step == step
    assert "something broke" in str(excinfo.value)
    assert excinfo.value.as_dict() == {"step": step, "output": "fatal: something broke"}


def test_commit_message_carries_prefix_and_timestamp():
    publisher = _publisher(ScriptedRunner(), commit_prefix="Update content")
    message = publisher.commit_message(datetime(2025, 3, 1, 12, 30, tzinfo=timezone.utc))
    assert message == "Update content - 2025-03-01T12:30:00+00:00"


def test_missing_git_executable_is_publish_error(tmp_path, monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(subprocess, "run", missing)
    with pytest.raises(PublishError) as excinfo:
        GitPublisher(tmp_path).publish()
    assert excinfo.value.step == "add"
    assert "git executable not found" in str(excinfo.value)


def test_timeout_is_publish_error(tmp_path, monkeypatch):
    def slow(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs.get("timeout"))

    monkeypatch.setattr(subprocess, "run", slow)
    with pytest.raises(PublishError) as excinfo:
        GitPublisher(tmp_path, timeout=3).publish()
    assert "timed out" in str(excinfo.value)


def _git(cwd, *args):
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_publish_against_real_repository(tmp_path):
    remote = tmp_path / "remote.git"
    work = tmp_path / "work"
    _git(tmp_path, "init", "--bare", str(remote))
    _git(tmp_path, "init", str(work))
    _git(work, "checkout", "-b", "main")
    _git(work, "config", "user.email", "editor@example.com")
    _git(work, "config", "user.name", "Editor")
    _git(work, "remote", "add", "origin", str(remote))
    (work / "README.md").write_text("site\n", encoding="utf-8")
    _git(work, "add", "-A")
    _git(work, "commit", "-m", "init")
    _git(work, "push", "origin", "main")

    publisher = GitPublisher(work, remote="origin", branch="main")
    (work / "content.json").write_text("{}\n", encoding="utf-8")
    first = publisher.publish()
    assert first.committed is True

    second = publisher.publish()
    assert second.committed is False
    assert second.message == NOTHING_MESSAGE

    log = subprocess.run(
        ["git", "log", "--format=%s", "main"],
        cwd=remote,
        check=True,
        capture_output=True,
        text=True,
    ).stdout.splitlines()
    assert log[0].startswith("Update content via admin panel - ")
    assert len(log) == 2


def test_missing_repository_directory_is_reported(tmp_path, monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError("git must not run")

    monkeypatch.setattr(subprocess, "run", unexpected)
    with pytest.raises(PublishError) as excinfo:
        GitPublisher(tmp_path / "missing").publish()
    assert excinfo.value.step == "add"
    assert "repository directory not found" in str(excinfo.value)
    assert "executable" not in str(excinfo.value)
