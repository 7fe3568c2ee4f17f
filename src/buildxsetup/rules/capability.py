"""
Capability gates keyed on the installed buildx version.

A buildx compiled from source reports a short commit instead of a release
number. Nothing can be said about what such a binary supports, so it is
treated as satisfying no range at all, as is anything that does not parse.
"""

import logging
import re
from functools import lru_cache

from .rule import Rule
from .version import Version
from ..exceptions import ExternalCommandError

logger = logging.getLogger(__name__)

COMMIT_REGEX = re.compile(r"^[0-9a-f]{7}$")
VERSION_OUTPUT_REGEX = re.compile(r"\sv?([0-9a-f]{7}|[0-9.]+)")


def is_commit(version: str) -> bool:
    return bool(COMMIT_REGEX.match(version or ""))


@lru_cache(maxsize=None)
def _rule(range_expr: str) -> Rule:
    return Rule(range_expr)


def satisfies(version: str, range_expr: str) -> bool:
    """Does `version` fall in `range_expr`? Unknown versions never do."""
    if is_commit(version):
        logger.debug(f"Version '{version}' is a commit, assuming '{range_expr}' is not supported")
        return False
    parsed = Version.try_parse(version)
    if parsed is None:
        logger.debug(f"Version '{version}' cannot be parsed, assuming '{range_expr}' is not supported")
        return False
    return parsed in _rule(range_expr)


def parse_version(stdout: str) -> str:
    """
    Pick the version out of `buildx version` output.

    'github.com/docker/buildx v0.9.1 ed00243...' gives '0.9.1', a source
    build such as 'github.com/docker/buildx 5fac64c 5fac64c2c...' gives the
    short commit.
    """
    match = VERSION_OUTPUT_REGEX.search(stdout or "")
    if not match:
        raise ExternalCommandError(f"Cannot parse buildx version from {stdout!r}")
    return match.group(1)
