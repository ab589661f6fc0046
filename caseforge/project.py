"""Scratch cargo projects on disk, used to run whole test suites end to end."""

from __future__ import annotations

import copy
import json
import os
import shutil
import subprocess
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Optional, Union

import tomlkit

ENV_CHANNEL = "CASEFORGE_TEST_CHANNEL"
DEFAULT_CHANNEL = "stable"
GLOBAL_TEST_ATTR = "#![cfg(test)]"

_KNOWN_CHANNELS = ("stable", "beta", "nightly")


@dataclass(frozen=True)
class Channel:
    """A toolchain channel: stable, beta, nightly or any custom toolchain name."""

    name: str

    @classmethod
    def parse(cls, value: str) -> "Channel":
        """Read a channel name; known channels are matched case-insensitively."""
        lowered = value.lower()
        return cls(lowered if lowered in _KNOWN_CHANNELS else value)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Channel":
        """Pick the channel named by the environment, or stable when unset."""
        if environ is None:
            environ = os.environ
        value = environ.get(ENV_CHANNEL)
        if value is None:
            return cls(DEFAULT_CHANNEL)
        return cls.parse(value)

    @property
    def is_custom(self) -> bool:
        return self.name not in _KNOWN_CHANNELS

    def cargo_arg(self) -> str:
        """The ``+toolchain`` argument that selects this channel."""
        return f"+{self.name}"


class _WorkspaceLock:
    """A readers-writer lock shared by a project and its subprojects."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            self._cond.wait_for(lambda: not self._writer)
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def _parse_toml_value(raw: str):
    return tomlkit.parse(f"value = {raw}")["value"]


class Project:
    """A cargo project created with ``cargo init`` under ``root``."""

    def __init__(
        self,
        root: Union[str, os.PathLike],
        name: str = "project",
        channel: Union[Channel, str, None] = None,
        nocapture: bool = False,
    ) -> None:
        self.root = Path(root)
        self.name = str(name)
        if channel is None:
            channel = Channel.from_env()
        elif isinstance(channel, str):
            channel = Channel.parse(channel)
        self.channel = channel
        self.nocapture = nocapture
        self._workspace = _WorkspaceLock()
        self._create()

    def __repr__(self) -> str:
        return f"Project(path={str(self.path())!r}, channel={self.channel.name!r})"

    def path(self) -> Path:
        return self.root / self.name

    def with_nocapture(self) -> "Project":
        """Let test output through when running the tests."""
        self.nocapture = True
        return self

    def renamed(self, name: str) -> "Project":
        """A view of this project under another name, without creating it."""
        other = copy.copy(self)
        other.name = str(name)
        return other

    def subproject(self, name: str) -> "Project":
        """Create a new project inside this one and add it to the workspace."""
        with self._workspace.write():
            self._workspace_add(str(name))
            child = copy.copy(self)
            child.root = self.path()
            child.name = str(name)
            child._create()
        return child

    def run_tests(self) -> subprocess.CompletedProcess:
        """Run ``cargo test`` in the project and return the finished process."""
        with self._workspace.read():
            code_path = self._code_path()
            if not self._has_test_global_attribute(code_path):
                self._add_test_global_attribute(code_path)
            cmd = ["cargo", self.channel.cargo_arg(), "test"]
            if self.nocapture:
                cmd += ["--", "--nocapture"]
            return subprocess.run(cmd, cwd=self.path(), capture_output=True)

    def compile(self) -> subprocess.CompletedProcess:
        """Run ``cargo build`` in the project and return the finished process."""
        with self._workspace.read():
            return subprocess.run(
                ["cargo", "build"], cwd=self.path(), capture_output=True
            )

    def set_code_file(self, src: Union[str, os.PathLike]) -> "Project":
        """Replace the project's code with the contents of ``src``."""
        shutil.copyfile(src, self._code_path())
        return self

    def append_code(self, code: str) -> None:
        with open(self._code_path(), "a", encoding="utf-8") as out:
            out.write(code)

    def add_dependency(self, crate_name: str, attrs: str) -> None:
        """Add a dependency given as a TOML value, unless it is already there."""
        doc = self._read_cargo_toml()
        if "dependencies" not in doc:
            doc["dependencies"] = tomlkit.table()
        dependencies = doc["dependencies"]
        if crate_name not in dependencies:
            dependencies[crate_name] = _parse_toml_value(attrs)
        self._save_cargo_toml(doc)

    def add_local_dependency(self, name: str) -> None:
        """Depend on the crate in the current working directory."""
        self.add_dependency(name, f"{{path={json.dumps(os.getcwd())}}}")

    def _create(self) -> None:
        completed = subprocess.run(
            ["cargo", "init", "--edition", "2018", self.name],
            cwd=self.root,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        if completed.returncode != 0:
            raise RuntimeError(
                f"cargo init return an error code: {completed.returncode}"
            )
        self._code_path().write_text("", encoding="utf-8")

    def _workspace_add(self, member: str) -> None:
        doc = self._read_cargo_toml()
        if "workspace" not in doc:
            doc["workspace"] = tomlkit.table()
        workspace = doc["workspace"]
        if "members" not in workspace:
            workspace["members"] = tomlkit.array()
        members = workspace["members"]
        if isinstance(members, list):
            members.append(member)
        self._save_cargo_toml(doc)

    @staticmethod
    def _has_test_global_attribute(path: Path) -> bool:
        return path.read_text(encoding="utf-8").startswith(GLOBAL_TEST_ATTR)

    @staticmethod
    def _add_test_global_attribute(path: Path) -> None:
        body = path.read_text(encoding="utf-8")
        path.write_text(GLOBAL_TEST_ATTR + body, encoding="utf-8")

    def _code_path(self) -> Path:
        return self.path() / "src" / "lib.rs"

    def _cargo_toml_path(self) -> Path:
        return self.path() / "Cargo.toml"

    def _read_cargo_toml(self) -> tomlkit.TOMLDocument:
        return tomlkit.parse(self._cargo_toml_path().read_text(encoding="utf-8"))

    def _save_cargo_toml(self, doc: tomlkit.TOMLDocument) -> None:
        self._cargo_toml_path().write_text(tomlkit.dumps(doc), encoding="utf-8")