"""
Models for `buildx inspect` output and the parser that fills them.

The text output is a header block for the builder followed by one block per
node, each block opening with a `Name:` line:

    Name:   builder-3c9f...
    Driver: docker-container

    Nodes:
    Name:      builder-3c9f...0
    Endpoint:  unix:///var/run/docker.sock
    Status:    running
    Flags:     --debug
    Platforms: linux/amd64*, linux/arm64
"""

import json
import logging
import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DRIVER_OPT_REGEX = re.compile(r'(\w+)="([^"]*)"')


class Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    endpoint: Optional[str] = None
    driver_opts: Optional[List[str]] = Field(default=None, alias="driver-opts")
    status: Optional[str] = None
    buildkitd_flags: Optional[str] = Field(default=None, alias="buildkitd-flags")
    buildkit: Optional[str] = None
    platforms: Optional[str] = None


class Builder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    driver: Optional[str] = None
    last_activity: Optional[datetime] = Field(default=None, alias="last-activity")
    nodes: List[Node] = Field(default_factory=list)

    @property
    def first_node(self) -> Optional[Node]:
        return self.nodes[0] if self.nodes else None

    def nodes_json(self) -> str:
        return json.dumps(
            [n.model_dump(by_alias=True, exclude_none=True) for n in self.nodes],
            indent=2,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def _parse_platforms(value: str) -> str:
    """Comma-join platforms; when some are starred (preferred) keep only those."""
    platforms = [p.strip() for p in value.split(',') if p.strip()]
    if any('*' in p for p in platforms):
        platforms = [p.replace('*', '') for p in platforms if '*' in p]
    return ','.join(platforms)


def _parse_activity(value: str) -> Optional[datetime]:
    for fmt in ("%Y-%m-%d %H:%M:%S %z %Z", "%Y-%m-%d %H:%M:%S %z", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    logger.debug(f"Unrecognized 'Last Activity' value: {value}")
    return None


def parse_inspect(stdout: str) -> Builder:
    """Parse the text output of `buildx inspect` into a Builder."""
    builder = Builder()
    node: dict = {}
    for line in stdout.strip().splitlines():
        key, _, rest = line.partition(':')
        key = key.strip().lower()
        value = rest.strip()
        if not key or not value:
            continue
        if key == 'name':
            if builder.name is None:
                builder.name = value
            else:
                if node:
                    builder.nodes.append(Node.model_validate(node))
                node = {'name': value}
        elif key == 'driver':
            builder.driver = value
        elif key == 'last activity':
            builder.last_activity = _parse_activity(value)
        elif key == 'endpoint':
            node['endpoint'] = value
        elif key == 'driver options':
            node['driver-opts'] = [f"{k}={v}" for k, v in DRIVER_OPT_REGEX.findall(value)]
        elif key == 'status':
            node['status'] = value
        elif key in ('flags', 'buildkit daemon flags'):
            node['buildkitd-flags'] = value
        elif key in ('buildkit', 'buildkit version'):
            node['buildkit'] = value
        elif key == 'platforms':
            node['platforms'] = _parse_platforms(value)
    if node:
        builder.nodes.append(Node.model_validate(node))
    return builder
