"""
Inputs of a setup run, resolved once before the lifecycle starts.

Inputs come from the runner's `INPUT_<NAME>` environment variables and,
optionally, from a YAML file whose keys win over the environment. Either way
they are validated into one frozen `Inputs` model.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from . import constants
from .constants import Driver
from .exceptions import ConfigFileMissingError, ConfigParsingError, ConfigValidationError

logger = logging.getLogger(__name__)

TRUE_VALUES = {"true", "True", "TRUE"}
FALSE_VALUES = {"false", "False", "FALSE"}

# input name -> how it is spelled by the runner
INPUT_NAMES = {
    "version": "version",
    "driver": "driver",
    "driver_opts": "driver-opts",
    "buildkitd_flags": "buildkitd-flags",
    "install": "install",
    "use": "use",
    "endpoint": "endpoint",
    "config": "config",
    "config_inline": "config-inline",
}


class Inputs(BaseModel):
    """
    Class Input-Validation Model for one setup run
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    version: Optional[str] = None
    driver: Driver = constants.DEFAULT_DRIVER
    driver_opts: List[str] = Field(default_factory=list, alias="driver-opts")
    buildkitd_flags: Optional[str] = Field(default=constants.DEFAULT_BUILDKITD_FLAGS, alias="buildkitd-flags")
    install: bool = False
    use: bool = True
    endpoint: Optional[str] = None
    config: Optional[str] = None
    config_inline: Optional[str] = Field(default=None, alias="config-inline")

    @model_validator(mode="before")
    @classmethod
    def normalize_raw(cls, data: Any) -> Any:
        """
        Unset inputs arrive as empty strings (or YAML nulls); treat them as absent so defaults
        apply. A config file path wins over inline config.
        """
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None and not (isinstance(v, str) and v.strip() == "")}
        inline_keys = [k for k in ("config_inline", "config-inline") if k in data]
        if "config" in data and inline_keys:
            logger.warning("Both 'config' and 'config-inline' are set, ignoring 'config-inline'")
            data = {k: v for k, v in data.items() if k not in inline_keys}
        return data

    @field_validator("install", "use", mode="before")
    @classmethod
    def parse_boolean(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text in TRUE_VALUES:
                return True
            if text in FALSE_VALUES:
                return False
        raise ValueError(
            "boolean inputs must be one of true | True | TRUE | false | False | FALSE"
        )

    @field_validator("driver_opts", mode="before")
    @classmethod
    def parse_list(cls, value: Any) -> Any:
        """Newline separated; commas are part of a driver option, not separators."""
        if isinstance(value, str):
            return [line.strip() for line in value.splitlines() if line.strip()]
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        return value

    @field_validator("version", "endpoint", "config", "config_inline", "buildkitd_flags", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        # YAML turns `version: 0.10` into a float
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def is_default_driver(self) -> bool:
        return self.driver is Driver.DOCKER


def _env_name(name: str) -> str:
    return constants.INPUT_ENV_PREFIX + name.replace(" ", "_").upper()


def inputs_from_env(env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    env = os.environ if env is None else env
    raw = {}
    for field_name, input_name in INPUT_NAMES.items():
        value = env.get(_env_name(input_name))
        if value is not None:
            raw[field_name] = value.strip() if field_name != "config_inline" else value
    return raw


def inputs_from_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigFileMissingError(f"Inputs file not found at: {path}")
    except yaml.YAMLError as e:
        raise ConfigParsingError(f"Error parsing YAML file: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParsingError("Inputs file must be a YAML document containing a dictionary.")
    logger.debug(f"Successfully parsed YAML from '{path}'.")
    # accept both 'driver-opts' and 'driver_opts'
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def get_inputs(env: Optional[Mapping[str, str]] = None, inputs_file: Optional[str] = None) -> Inputs:
    """Resolve and validate the inputs; YAML file values override the environment."""
    raw: Dict[str, Any] = inputs_from_env(env)
    if inputs_file:
        logger.info(f"Loading inputs from '{inputs_file}'...")
        raw.update(inputs_from_yaml(inputs_file))
    try:
        inputs = Inputs.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Inputs validation failed:\n{e}")
    logger.debug(f"Inputs: {inputs.model_dump_json(indent=2)}")
    return inputs


def docker_config_home(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    configured = env.get(constants.ENV_DOCKER_CONFIG)
    return Path(configured) if configured else Path.home() / ".docker"


def new_tmp_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """A fresh scratch directory for this run, under RUNNER_TEMP when there is one."""
    env = os.environ if env is None else env
    base = env.get(constants.ENV_RUNNER_TEMP) or None
    return Path(tempfile.mkdtemp(prefix="docker-setup-buildx-", dir=base))
