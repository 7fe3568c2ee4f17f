"""
Buildx releases published on GitHub.

Network access goes through fsspec's HTTP filesystem so tests can hand in any
other object with `cat_file` and `open`.
"""

import json
import logging
import platform
import shutil
from pathlib import Path
from typing import Optional

import fsspec
from pydantic import BaseModel, ConfigDict

from .. import constants
from ..exceptions import ToolInstallError
from ..rules import Version

logger = logging.getLogger(__name__)


class Release(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    tag_name: str
    html_url: Optional[str] = None

    @property
    def version(self) -> str:
        return self.tag_name.strip().lstrip('v')


def release_url(version: str) -> str:
    if version == "latest":
        return constants.RELEASE_URL.format(tag="latest")
    return constants.RELEASE_URL.format(tag=f"tag/v{version.lstrip('v')}")


def asset_filename(version: str, system: Optional[str] = None, machine: Optional[str] = None) -> str:
    """buildx-v<version>.<os>-<arch>[.exe] for the running (or given) platform."""
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    arch = constants.ARCH_ALIASES.get(machine, machine)
    ext = ".exe" if system == "windows" else ""
    return f"buildx-v{version}.{system}-{arch}{ext}"


class ReleaseClient:
    """Looks up and downloads buildx release binaries."""

    def __init__(self, fs: Optional[fsspec.AbstractFileSystem] = None):
        self.fs = fs if fs is not None else fsspec.filesystem(
            "https", headers={"Accept": "application/json"}
        )

    def get_release(self, version: str) -> Release:
        url = release_url(version)
        logger.debug(f"Fetching release metadata from {url}")
        try:
            raw = self.fs.cat_file(url)
        except FileNotFoundError as e:
            raise ToolInstallError(f"Cannot find buildx {version} release") from e
        except Exception as e:
            raise ToolInstallError(f"Cannot fetch buildx {version} release: {e}") from e
        try:
            release = Release.model_validate(json.loads(raw))
        except ValueError as e:
            raise ToolInstallError(f"Unexpected release metadata for buildx {version}: {e}") from e
        logger.debug(f"Release {release.tag_name} found")
        return release

    def download(self, version: str, dest: Path) -> Path:
        """Download the binary for `version` into `dest` (a file path)."""
        if Version.try_parse(version) is None:
            raise ToolInstallError(f"Invalid Buildx version \"{version}\".")
        url = constants.DOWNLOAD_URL.format(version=version, filename=asset_filename(version))
        logger.info(f"Downloading {url}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.fs.open(url, "rb") as src, open(dest, "wb") as dst:
                shutil.copyfileobj(src, dst)
        except Exception as e:
            dest.unlink(missing_ok=True)
            raise ToolInstallError(f"Failed to download buildx {version} from {url}: {e}") from e
        return dest
