"""File handles, templates and the managed file action generator."""

from .file_action import Deferred, FileAction, FileSpec, define_file, parse_file_spec
from .handles import LocalFile, RemoteFile, parse_mode
from .template import Template

__all__ = [
    "Deferred",
    "FileAction",
    "FileSpec",
    "LocalFile",
    "RemoteFile",
    "Template",
    "define_file",
    "parse_file_spec",
    "parse_mode",
]
