"""
TLS client credentials for remote BuildKit endpoints.

Certificates come from `BUILDER_NODE_<index>_AUTH_TLS_{CACERT,CERT,KEY}` and
are written into the builder's credentials directory. Only the `remote`
driver takes them as driver options.
"""

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional
from urllib.parse import urlsplit

from . import constants

logger = logging.getLogger(__name__)

# env suffix -> file prefix, also the driver option name
_TLS_MATERIAL = (
    ("CACERT", "cacert"),
    ("CERT", "cert"),
    ("KEY", "key"),
)


def set_credentials(
    credsdir: str | os.PathLike,
    index: int,
    driver: str,
    endpoint: Optional[str],
    env: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Write TLS material for node `index` and return the extra `--driver-opt` values."""
    if not endpoint:
        return []
    try:
        url = urlsplit(endpoint)
        port = url.port
    except ValueError:
        return []
    if url.scheme == "tcp":
        return _set_buildkit_client_certs(Path(credsdir), index, driver, url.hostname or "", port, env)
    return []


def _set_buildkit_client_certs(
    credsdir: Path,
    index: int,
    driver: str,
    hostname: str,
    port: Optional[int],
    env: Optional[Mapping[str, str]],
) -> List[str]:
    env = os.environ if env is None else env
    material = {
        suffix: env.get(constants.TLS_ENV_TEMPLATE.format(index=index, kind=suffix), "")
        for suffix, _ in _TLS_MATERIAL
    }
    if not any(material.values()):
        return []

    host = f"{hostname}-{port}" if port else hostname
    credsdir.mkdir(parents=True, exist_ok=True)
    driver_opts = []
    for suffix, name in _TLS_MATERIAL:
        content = material[suffix]
        if not content:
            continue
        path = credsdir / f"{name}_{host}.pem"
        path.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {name} for node {index} to {path}")
        driver_opts.append(f"{name}={path}")

    if driver != constants.Driver.REMOTE.value:
        return []
    return driver_opts
