"""
Unit Test Fixtures

Provides an in-memory node and a recording log sink so execution contexts can
be exercised without a transport.
"""

import shlex
from typing import Any, Dict, List, Optional, Tuple

import pytest

from provisioner.engine import Package, PackageIndex
from provisioner.executors import ExecutionContext, MockExecutionContext
from provisioner.nodes import Node, NodeHelper
from provisioner.observability import LogSink
from provisioner.settings import reset_settings


class FakeHelper(NodeHelper):
    def __init__(self):
        self.cwd: Optional[str] = None
        self.history: List[Optional[str]] = []

    def set_cwd(self, path: Optional[str]) -> Optional[str]:
        previous = self.cwd
        self.cwd = path
        self.history.append(path)
        return previous


class FakeNode(Node):
    """
    In-memory node.

    Records every call in `calls`. Remote file contents live in `files`,
    `stat -c` queries are answered from `stats` as (mode, user, group).
    """

    def __init__(self, name: str = "web1", user: str = "deploy", config: Optional[Dict[str, Any]] = None):
        self.name = name
        self.user = user
        self.config = config or {}
        self.calls: List[Tuple[Any, ...]] = []
        self.files: Dict[str, bytes] = {}
        self.stats: Dict[str, Tuple[int, str, str]] = {}
        self.env_vars: Dict[str, str] = {"HOME": f"/home/{user}"}
        self.binaries = {"sh", "ls"}
        self.fail_on: Optional[str] = None
        self._helper = FakeHelper()
        self.children: Dict[str, "FakeNode"] = {}

    @property
    def helper(self) -> FakeHelper:
        return self._helper

    def _check(self, cmd: str) -> None:
        if self.fail_on and self.fail_on in cmd:
            raise RuntimeError(f"command failed: {cmd}")

    def run(self, cmd: str, **opts: Any) -> str:
        self.calls.append(("run", cmd))
        self._check(cmd)
        if cmd.startswith("stat -c "):
            path = cmd.rsplit(" ", 1)[1].strip("'")
            if path in self.stats:
                mode, user, group = self.stats[path]
                return f"{mode:o} {user} {group}\n"
            return ""
        if cmd.startswith("test -e "):
            path = shlex.split(cmd)[2]
            return "yes\n" if path in self.files or path in self.stats else "no\n"
        return f"ran {cmd}"

    def sudo(self, cmd: str, **opts: Any) -> str:
        self.calls.append(("sudo", cmd))
        self._check(cmd)
        return ""

    def env(self, name: str) -> Optional[str]:
        self.calls.append(("env", name))
        return self.env_vars.get(name)

    def binary_exists(self, name: str) -> bool:
        self.calls.append(("binary_exists", name))
        return name in self.binaries

    def upload(self, src: str, dst: str) -> None:
        self.calls.append(("upload", src, dst))
        with open(src, "rb") as fh:
            self.files[dst] = fh.read()

    def download(self, src: str, dst: str) -> None:
        self.calls.append(("download", src, dst))
        with open(dst, "wb") as fh:
            fh.write(self.files[src])

    def mkdir(self, path: str) -> None:
        self.calls.append(("mkdir", path))

    def delete(self, path: str) -> None:
        self.calls.append(("delete", path))
        self.files.pop(path, None)

    def copy(self, src: str, dst: str) -> None:
        self.calls.append(("copy", src, dst))
        self.files[dst] = self.files[src]

    def move(self, src: str, dst: str) -> None:
        self.calls.append(("move", src, dst))
        self.files[dst] = self.files.pop(src)

    def set_permissions(self, path: str, mask: int) -> None:
        self.calls.append(("set_permissions", path, mask))

    def set_owner(self, path: str, user: str, group: Optional[str] = None) -> None:
        self.calls.append(("set_owner", path, user, group))

    def for_user(self, user: str) -> "FakeNode":
        self.calls.append(("for_user", user))
        child = FakeNode(name=self.name, user=user, config=self.config)
        child.files = self.files
        child.stats = self.stats
        self.children[user] = child
        return child


class RecordingLog(LogSink):
    def __init__(self, node: Any = None, task: Optional[str] = None):
        self.node = node
        self.task = task
        self.entries: List[Tuple[str, Any]] = []
        self.clones: List["RecordingLog"] = []

    def log(self, msg: str) -> None:
        self.entries.append(("log", msg))

    def local(self, cmd: str) -> None:
        self.entries.append(("local", cmd))

    def stdout(self, text: str) -> None:
        self.entries.append(("stdout", text))

    def stderr(self, text: str) -> None:
        self.entries.append(("stderr", text))

    def mock_execute(self, description: str) -> None:
        self.entries.append(("mock", description))

    def set_task(self, name: Optional[str]) -> Optional[str]:
        previous = self.task
        self.task = name
        return previous

    def clone_for_node(self, node: Any) -> "RecordingLog":
        clone = RecordingLog(node, task=self.task)
        self.clones.append(clone)
        return clone

    def kinds(self, kind: str) -> List[Any]:
        return [value for k, value in self.entries if k == kind]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point template renders at a per-test directory."""
    monkeypatch.setenv("PROVISIONER_TEMPLATE_CACHE", str(tmp_path / "template-cache"))
    monkeypatch.setenv("PROVISIONER_TMP_PREFIX", "provisioner-tmp")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def node():
    return FakeNode(config={"app": {"name": "shop", "port": 8080}, "env": "prod"})


@pytest.fixture
def log():
    return RecordingLog()


@pytest.fixture
def index():
    return PackageIndex()


@pytest.fixture
def package(index):
    """An empty package registered in the index."""
    return index.register(Package(name="base", defaults={"app": {"port": 80, "workers": 4}}))


@pytest.fixture
def context(node, log, index):
    return ExecutionContext(node, log, index)


@pytest.fixture
def mock_context(node, log, index):
    return MockExecutionContext(node, log, index)
