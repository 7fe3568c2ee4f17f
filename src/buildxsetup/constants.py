from enum import Enum

# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "life": "buildxsetup.lifecycle",
    "lc": "buildxsetup.lifecycle",
    "bx": "buildxsetup.buildx",
    "tool": "buildxsetup.buildx.tool",
    "rel": "buildxsetup.buildx.release",
    "cmd": "buildxsetup.buildx.command",
    "exec": "buildxsetup.utils.process",
    "proc": "buildxsetup.utils.process",
    "eng": "buildxsetup.engine",
    "docker": "buildxsetup.engine",
    "state": "buildxsetup.state",
    "st": "buildxsetup.state",
    "ctx": "buildxsetup.context",
    "conf": "buildxsetup.context",
    "out": "buildxsetup.outputs",
    "auth": "buildxsetup.auth",
}

# Top-level modules within buildxsetup for auto-prefixing
KNOWN_TOP_MODULES = {
    "lifecycle",
    "buildx",
    "rules",
    "utils",
    "engine",
    "state",
    "context",
    "outputs",
    "auth",
    "exceptions",
}

LOG_LEVELS_ENV = "BXS_LOG_LEVELS"


# --- Drivers ---
class Driver(str, Enum):
    DOCKER = "docker"
    DOCKER_CONTAINER = "docker-container"
    KUBERNETES = "kubernetes"
    REMOTE = "remote"


DEFAULT_DRIVER = Driver.DOCKER_CONTAINER
DEFAULT_BUILDKITD_FLAGS = (
    "--allow-insecure-entitlement security.insecure "
    "--allow-insecure-entitlement network.host"
)

# --- Builder identity ---
DEFAULT_BUILDER_NAME = "default"
BUILDER_NAME_PREFIX = "builder-"
BUILDKIT_CONTAINER_PREFIX = "buildx_buildkit_"

# --- Capability gates (buildx versions) ---
CAP_DRIVER_OPTS = ">=0.3.0"
CAP_BOOTSTRAP_BUILDER = ">=0.4.0"

# --- Binaries ---
DOCKER_BIN = "docker"
BUILDX_BIN = "buildx"
BUILDX_PLUGIN_NAME = "docker-buildx"
PLUGINS_SUBDIR = "cli-plugins"

# --- Releases ---
BUILDX_REPO = "docker/buildx"
RELEASE_URL = "https://github.com/docker/buildx/releases/{tag}"
DOWNLOAD_URL = "https://github.com/docker/buildx/releases/download/v{version}/{filename}"
DEFAULT_SOURCE_REF = "master"
BUILD_TARGET = "binaries"
TOOL_CACHE_NAME = "buildx"

ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "ppc64": "ppc64le",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "armv6l": "arm-v6",
    "armv7l": "arm-v7",
}

# --- Runner environment ---
ENV_DOCKER_CONFIG = "DOCKER_CONFIG"
ENV_STATE_FILE = "GITHUB_STATE"
ENV_OUTPUT_FILE = "GITHUB_OUTPUT"
ENV_PATH_FILE = "GITHUB_PATH"
ENV_TOOL_CACHE = "RUNNER_TOOL_CACHE"
ENV_RUNNER_TEMP = "RUNNER_TEMP"
ENV_RUNNER_DEBUG = "RUNNER_DEBUG"
ENV_ACTIONS = "GITHUB_ACTIONS"
INPUT_ENV_PREFIX = "INPUT_"
STATE_ENV_PREFIX = "STATE_"
TLS_ENV_TEMPLATE = "BUILDER_NODE_{index}_AUTH_TLS_{kind}"


# --- Cross-phase state keys ---
class StateKey(str, Enum):
    IS_POST = "isPost"
    STANDALONE = "standalone"
    BUILDER_NAME = "builderName"
    CREDS_DIR = "credsDir"
    CONTAINER_NAME = "containerName"
    DEBUG = "debug"


# --- Published outputs ---
OUTPUT_NAME = "name"
OUTPUT_DRIVER = "driver"
OUTPUT_PLATFORMS = "platforms"
OUTPUT_NODES = "nodes"
# deprecated mirrors of the first node, kept for existing workflows
OUTPUT_ENDPOINT = "endpoint"
OUTPUT_STATUS = "status"
OUTPUT_FLAGS = "flags"

BUILDKITD_DEBUG_FLAG = "--debug"
