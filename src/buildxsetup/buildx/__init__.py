"""
Buildx Setup - buildx Module

- command: ExecutionMode and the single place buildx invocations are built
- tool: availability, version, install, build from source, inspect
- inspect: Builder / Node models and the `buildx inspect` parser
- release: GitHub release lookup and download
- source: resolving `repo#ref` source references
- config_file: buildkitd config file arguments
"""

from .command import ExecutionMode, get_command
from .config_file import get_config_file, get_config_inline
from .inspect import Builder, Node, parse_inspect
from .release import Release, ReleaseClient
from .tool import BuildxTool, ToolCache

__all__ = [
    'ExecutionMode',
    'get_command',
    'get_config_file',
    'get_config_inline',
    'Builder',
    'Node',
    'parse_inspect',
    'Release',
    'ReleaseClient',
    'BuildxTool',
    'ToolCache',
]
