"""
File handles bound to an execution context.

LocalFile is a file on the controlling machine, RemoteFile one on the node.
Every node access goes through the context primitives so it is logged, and
suppressed under a MockExecutionContext.
"""

from __future__ import annotations

import grp
import os
import pwd
import shlex
import shutil
import stat
import tempfile
from typing import TYPE_CHECKING, Optional, Tuple, Union

from provisioner.engine.models import sha256_bytes, sha256_file

if TYPE_CHECKING:
    from provisioner.executors.context import ExecutionContext

FileHandle = Union["LocalFile", "RemoteFile"]


def parse_mode(mask: Union[int, str, None]) -> Optional[int]:
    """Permission bits from an int mask or an octal string ("644", "0o644")."""
    if mask is None:
        return None
    if isinstance(mask, bool):
        raise ValueError(f"invalid_permissions: {mask!r}")
    if isinstance(mask, int):
        return mask
    text = str(mask).strip().lower()
    if text.startswith("0o"):
        text = text[2:]
    return int(text, 8)


class LocalFile:
    def __init__(self, context: "ExecutionContext", path: str):
        self.context = context
        self.path = str(path)

    def __repr__(self) -> str:
        return f"LocalFile({self.path!r})"

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as fh:
            return fh.read()

    def content_hash(self) -> str:
        return sha256_file(self.path)

    def copy_to(self, other: FileHandle) -> FileHandle:
        if isinstance(other, RemoteFile):
            self.context.upload(self.path, other.path)
        else:
            shutil.copyfile(self.path, other.path)
        return other

    def delete(self) -> None:
        os.remove(self.path)

    def matches(self, other: FileHandle) -> bool:
        return sha256_bytes(self.read_bytes()) == sha256_bytes(other.read_bytes())

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(os.stat(self.path).st_mode)

    @property
    def user(self) -> str:
        return pwd.getpwuid(os.stat(self.path).st_uid).pw_name

    @property
    def group(self) -> str:
        return grp.getgrgid(os.stat(self.path).st_gid).gr_name

    def set_permissions(self, mask: Union[int, str]) -> None:
        os.chmod(self.path, parse_mode(mask))

    def set_owner(self, user: str, group: Optional[str] = None) -> None:
        shutil.chown(self.path, user=user, group=group)

    def set_group(self, group: str) -> None:
        shutil.chown(self.path, group=group)


class RemoteFile:
    def __init__(self, context: "ExecutionContext", path: str):
        self.context = context
        self.path = str(path)

    def __repr__(self) -> str:
        return f"RemoteFile({self.path!r})"

    def stat(self) -> Tuple[Optional[int], Optional[str], Optional[str]]:
        output = self.context.run(f"stat -c '%a %U %G' {shlex.quote(self.path)}") or ""
        fields = output.strip().split()
        if len(fields) != 3:
            return None, None, None
        return parse_mode(fields[0]), fields[1], fields[2]

    def exists(self) -> bool:
        """False when the node reports nothing, as under a mock context."""
        output = self.context.run(f"test -e {shlex.quote(self.path)} && echo yes || echo no") or ""
        return output.strip() == "yes"

    def read_bytes(self) -> bytes:
        fd, tmp_path = tempfile.mkstemp(prefix="provisioner-download-")
        os.close(fd)
        try:
            self.context.download(self.path, tmp_path)
            with open(tmp_path, "rb") as fh:
                return fh.read()
        finally:
            os.unlink(tmp_path)

    def copy_to(self, other: FileHandle) -> FileHandle:
        if isinstance(other, RemoteFile):
            self.context.copy(self.path, other.path)
        else:
            self.context.download(self.path, other.path)
        return other

    def delete(self) -> None:
        self.context.remove(self.path)

    def matches(self, other: FileHandle) -> bool:
        return sha256_bytes(self.read_bytes()) == sha256_bytes(other.read_bytes())

    @property
    def permissions(self) -> Optional[int]:
        return self.stat()[0]

    @property
    def user(self) -> Optional[str]:
        return self.stat()[1]

    @property
    def group(self) -> Optional[str]:
        return self.stat()[2]

    def set_permissions(self, mask: Union[int, str]) -> None:
        self.context.set_permissions(self.path, parse_mode(mask))

    def set_owner(self, user: str, group: Optional[str] = None) -> None:
        self.context.set_owner(self.path, user, group)

    def set_group(self, group: str) -> None:
        self.context.sudo(f"chgrp {shlex.quote(group)} {shlex.quote(self.path)}")
