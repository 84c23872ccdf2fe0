"""Publish persisted content by committing and pushing the repository.

The sequence is ``git add -A``, ``git commit`` and ``git push <remote> <branch>``.
A commit step that reports nothing to commit is a successful no-op; every other
failure is raised as :class:`PublishError` with the step and git's output.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence

from landing.config import settings

logger = logging.getLogger("admin")

PUBLISHED_MESSAGE = "Changes committed and pushed successfully"
NOTHING_MESSAGE = "No changes to deploy"

_NOTHING_MARKERS = ("nothing to commit", "nothing added to commit", "no changes added to commit")


@dataclass
class CommandResult:
    returncode: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class PublishResult:
    message: str
    committed: bool


class PublishError(RuntimeError):
    """Raised when a publish step fails for a reason other than "nothing to commit"."""

    def __init__(self, step: str, output: str) -> None:
        super().__init__(f"git {step} failed: {output.strip() or 'no output'}")
        self.step = step
        self.output = output

    def as_dict(self) -> dict[str, str]:
        return {"step": self.step, "output": self.output.strip()}


Runner = Callable[[Sequence[str]], CommandResult]


class GitPublisher:
    def __init__(
        self,
        repo_dir: str | Path,
        *,
        remote: str = "origin",
        branch: str = "main",
        commit_prefix: str = "Update content via admin panel",
        timeout: float = 60.0,
        runner: Runner | None = None,
    ) -> None:
        self.repo_dir = Path(repo_dir)
        self.remote = remote
        self.branch = branch
        self.commit_prefix = commit_prefix
        self.timeout = timeout
        self._runner = runner or self._run

    @classmethod
    def from_settings(cls) -> "GitPublisher":
        return cls(
            settings.GIT_REPO_DIR,
            remote=settings.GIT_REMOTE,
            branch=settings.GIT_BRANCH,
            commit_prefix=settings.GIT_COMMIT_PREFIX,
            timeout=settings.GIT_TIMEOUT_SECONDS,
        )

    def _run(self, command: Sequence[str]) -> CommandResult:
        step = command[1] if len(command) > 1 else "run"
        if not self.repo_dir.is_dir():
            raise PublishError(step, f"repository directory not found: {self.repo_dir}")
        env = dict(os.environ)
        # english messages so "nothing to commit" can be detected
        env["LC_ALL"] = "C"
        env["GIT_TERMINAL_PROMPT"] = "0"
        try:
            process = subprocess.run(
                list(command),
                cwd=self.repo_dir,
                env=env,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise PublishError(step, f"git executable not found: {exc}") from exc
        except subprocess.TimeoutExpired as exc:
            raise PublishError(step, f"timed out after {exc.timeout}s") from exc
        output = (process.stdout or "") + (process.stderr or "")
        return CommandResult(process.returncode, output.strip())

    def commit_message(self, now: datetime | None = None) -> str:
        stamp = (now or datetime.now(timezone.utc)).isoformat(timespec="seconds")
        return f"{self.commit_prefix} - {stamp}"

    def publish(self) -> PublishResult:
        logger.info("publish started repo=%s remote=%s branch=%s", self.repo_dir, self.remote, self.branch)

        added = self._runner(["git", "add", "-A"])
        if not added.success:
            raise PublishError("add", added.output)

        committed = self._runner(["git", "commit", "-m", self.commit_message()])
        if not committed.success:
            lowered = committed.output.lower()
            if any(marker in lowered for marker in _NOTHING_MARKERS):
                logger.info("publish skipped: nothing to commit")
                return PublishResult(NOTHING_MESSAGE, committed=False)
            raise PublishError("commit", committed.output)

        pushed = self._runner(["git", "push", self.remote, self.branch])
        if not pushed.success:
            raise PublishError("push", pushed.output)

        logger.info("publish finished")
        return PublishResult(PUBLISHED_MESSAGE, committed=True)


def get_publisher() -> GitPublisher:
    return GitPublisher.from_settings()


__all__ = [
    "CommandResult",
    "GitPublisher",
    "NOTHING_MESSAGE",
    "PUBLISHED_MESSAGE",
    "PublishError",
    "PublishResult",
    "get_publisher",
]
