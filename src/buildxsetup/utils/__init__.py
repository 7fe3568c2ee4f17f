"""
Buildx Setup Utils Module

- logger: Logging setup, per-module levels and log groups
- process: Synchronous command execution

Usage:
    from buildxsetup.utils import setup_logger, log_group, Executor, Command
"""

from .logger import setup_logger, log_group, parse_module_levels, runner_debug
from .process import Command, ExecResult, Executor

__all__ = [
    'setup_logger',
    'log_group',
    'parse_module_levels',
    'runner_debug',
    'Command',
    'ExecResult',
    'Executor',
]
