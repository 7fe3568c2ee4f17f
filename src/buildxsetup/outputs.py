import logging
import os
import sys
import uuid
from pathlib import Path
from typing import Mapping, Optional

from . import constants

logger = logging.getLogger(__name__)


class OutputPublisher:
    """Step outputs for the surrounding job, written to the runner's output file."""

    def __init__(self, output_file: Optional[str | os.PathLike] = None, env: Optional[Mapping[str, str]] = None):
        env = os.environ if env is None else env
        if output_file is None:
            output_file = env.get(constants.ENV_OUTPUT_FILE) or None
        self.output_file = Path(output_file) if output_file else None

    def set_output(self, name: str, value: Optional[str]) -> None:
        value = "" if value is None else str(value)
        logger.debug(f"Output {name}={value}")
        if self.output_file is not None:
            delim = f"ghadelimiter_{uuid.uuid4()}"
            with open(self.output_file, "a", encoding="utf-8") as f:
                f.write(f"{name}<<{delim}\n{value}\n{delim}\n")
        else:
            escaped = value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
            sys.stdout.write(f"::set-output name={name}::{escaped}\n")
            sys.stdout.flush()
