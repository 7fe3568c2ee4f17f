import logging
import re
from typing import Tuple
from urllib.parse import urlsplit

import git

from .. import constants
from ..exceptions import ToolInstallError

logger = logging.getLogger(__name__)

SHA_REGEX = re.compile(r"^[0-9a-fA-F]{40}$")


def is_valid_url(value: str | None) -> bool:
    """A `version` input that is a URL asks for a build from source."""
    if not value:
        return False
    parts = urlsplit(value)
    return bool(parts.scheme) and bool(parts.netloc)


def split_source_ref(source: str) -> Tuple[str, str]:
    """'https://github.com/docker/buildx.git#v0.9.0' -> (repo, ref); ref defaults to master."""
    repo, _, ref = source.partition('#')
    return repo, ref or constants.DEFAULT_SOURCE_REF


def get_remote_sha(repo: str, ref: str) -> str:
    """Resolve `ref` in `repo` to a commit sha with `git ls-remote`."""
    try:
        out = git.cmd.Git().ls_remote(repo, ref)
    except git.exc.GitCommandError as e:
        raise ToolInstallError(f"Cannot resolve ref '{ref}' in '{repo}': {e}") from e
    sha = out.split()[0] if out.strip() else ""
    if not sha:
        raise ToolInstallError(f"Cannot find remote ref for {repo}#{ref}")
    logger.debug(f"Resolved {repo}#{ref} to {sha}")
    return sha


def resolve_version_spec(source: str) -> str:
    """Commit sha identifying what a source build would produce."""
    repo, ref = split_source_ref(source)
    if SHA_REGEX.match(ref):
        return ref
    return get_remote_sha(repo, ref)
