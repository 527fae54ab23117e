"""Shared fixtures: a recording logger and a fake storage CLI."""

import re
import shutil
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, List, Optional, Sequence

import pytest

from cng_tools.backup import CommandResult, CommandRunner
from cng_tools.logger import Logger


class RecordingLogger(Logger):
    """Keeps every log call in memory."""

    def __init__(self):
        self.records: List[tuple] = []

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        self.records.append((level, message, kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log("CRITICAL", message, **kwargs)

    def get_session_id(self) -> str:
        return "test0000"

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [m for lvl, m, _ in self.records if level is None or lvl == level]

    def text(self) -> str:
        return "\n".join(self.messages())


class FakeStorageRunner:
    """Emulates s3cmd, the aws CLI and gsutil against directories under ``root``.

    ``s3://bucket/path`` and ``gs://bucket/path`` map to ``root/bucket/path``.
    tar commands run for real. ``fail_on`` makes any command whose joined
    text contains it exit 1.
    """

    def __init__(self, root: Path, fail_on: Optional[str] = None):
        self.root = root
        self.fail_on = fail_on
        self.commands: List[List[str]] = []
        self._real = CommandRunner(RecordingLogger())

    def run(self, command: Sequence[str]) -> CommandResult:
        command = list(command)
        self.commands.append(command)
        if self.fail_on and self.fail_on in " ".join(command):
            return CommandResult(command, "simulated failure", 1)
        if command[0] == "tar":
            return self._real.run(command)
        if command[0] == "s3cmd":
            return self._s3cmd(command)
        if command[0] == "gsutil":
            return self._gsutil(command)
        if command[0] == "aws":
            return self._awscli(command)
        raise AssertionError(f"unexpected command {command}")

    def tools_used(self) -> List[str]:
        return [" ".join(c[:3]) for c in self.commands]

    def _resolve(self, arg: str) -> Path:
        if "://" in arg:
            return self.root / arg.split("://", 1)[1].rstrip("/*").rstrip("/")
        return Path(arg)

    @staticmethod
    def _files(base: Path) -> List[str]:
        if not base.is_dir():
            return []
        return sorted(p.relative_to(base).as_posix() for p in base.rglob("*") if p.is_file())

    def _sync(self, command, src: Path, dst: Path, skip=None, delete=False) -> CommandResult:
        if not src.exists():
            return CommandResult(command, f"{src} does not exist", 1)
        copied = []
        for rel in self._files(src):
            if skip and skip(rel):
                continue
            target = dst / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src / rel, target)
            copied.append(rel)
        if delete:
            for rel in self._files(dst):
                if rel not in copied:
                    (dst / rel).unlink()
        return CommandResult(command, "\n".join(copied), 0)

    @staticmethod
    def _clear(bucket: Path) -> None:
        for child in bucket.iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()

    def _s3cmd(self, command: List[str]) -> CommandResult:
        if "ls" in command:
            bucket = self._resolve(command[-1])
            if not bucket.is_dir():
                return CommandResult(command, "ERROR: Bucket does not exist", 12)
            return CommandResult(command, "", 0)
        if "del" in command:
            self._clear(self._resolve(command[-1]))
            return CommandResult(command, "", 0)
        if "sync" in command:
            pattern = command[command.index("--exclude") + 1] if "--exclude" in command else None
            return self._sync(
                command,
                self._resolve(command[-2]),
                self._resolve(command[-1]),
                skip=(lambda rel: fnmatch(rel, pattern)) if pattern else None,
                delete="--delete-removed" in command,
            )
        raise AssertionError(f"unexpected s3cmd command {command}")

    def _awscli(self, command: List[str]) -> CommandResult:
        if command[1:3] == ["s3api", "head-bucket"]:
            bucket = self.root / command[command.index("--bucket") + 1]
            if not bucket.is_dir():
                return CommandResult(
                    command, "An error occurred (404) when calling the HeadBucket operation", 254
                )
            return CommandResult(command, "", 0)
        if command[1:3] == ["s3", "rm"]:
            self._clear(self._resolve(command[-1]))
            return CommandResult(command, "", 0)
        if command[1:3] == ["s3", "sync"]:
            pattern = command[command.index("--exclude") + 1] if "--exclude" in command else None
            return self._sync(
                command,
                self._resolve(command[-2]),
                self._resolve(command[-1]),
                skip=(lambda rel: fnmatch(rel, pattern)) if pattern else None,
                delete="--delete" in command,
            )
        raise AssertionError(f"unexpected aws command {command}")

    def _gsutil(self, command: List[str]) -> CommandResult:
        if command[1] == "ls":
            bucket = self._resolve(command[-1])
            if not bucket.is_dir():
                return CommandResult(command, "BucketNotFoundException: 404", 1)
            listing = "\n".join(f"{command[-1].rstrip('/')}/{p.name}" for p in sorted(bucket.iterdir()))
            return CommandResult(command, listing, 0)
        if command[1] == "rm":
            self._clear(self._resolve(command[-1]))
            return CommandResult(command, "", 0)
        if "rsync" in command:
            regexp = command[command.index("-x") + 1] if "-x" in command else None
            return self._sync(
                command,
                self._resolve(command[-2]),
                self._resolve(command[-1]),
                skip=(lambda rel: re.match(regexp, rel) is not None) if regexp else None,
                delete="-d" in command,
            )
        raise AssertionError(f"unexpected gsutil command {command}")


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Directory whose children act as remote buckets."""
    root = tmp_path / "remote"
    root.mkdir()
    return root


@pytest.fixture
def fake_storage(storage_root: Path) -> FakeStorageRunner:
    return FakeStorageRunner(storage_root)


def populate(bucket: Path, files: dict) -> None:
    """Write ``{relative path: content}`` into a bucket directory."""
    for rel, content in files.items():
        path = bucket / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def bucket_contents(bucket: Path) -> dict:
    return {
        p.relative_to(bucket).as_posix(): p.read_text()
        for p in sorted(bucket.rglob("*"))
        if p.is_file()
    }
