"""
Buildx Setup Rules Module

- Rule: a range of versions
- Version: semantic version ordering
- satisfies: capability gate over a buildx version string

Usage:
    from buildxsetup.rules import Rule, Version, satisfies
"""

from .rule import Rule
from .version import Version
from .capability import satisfies, is_commit, parse_version

__all__ = [
    'Rule',
    'Version',
    'satisfies',
    'is_commit',
    'parse_version',
]
