import logging
import os
import tempfile
from pathlib import Path

from ..exceptions import ConfigFileMissingError

logger = logging.getLogger(__name__)


def get_config_file(path: str) -> str:
    """A buildkitd config given by path is handed to buildx as is, once it is known to exist."""
    if not Path(path).is_file():
        raise ConfigFileMissingError(f"config file {path} not found")
    return path


def get_config_inline(content: str, tmp_dir: str | os.PathLike) -> str:
    """Write inline buildkitd config to a fresh file under `tmp_dir` and return its path."""
    fd, config_path = tempfile.mkstemp(prefix="buildkitd-", suffix=".toml", dir=tmp_dir)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    logger.debug(f"Inline buildkitd config written to {config_path}")
    return config_path
