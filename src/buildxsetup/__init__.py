"""
Buildx Setup

Creates an ephemeral buildx builder for one CI job and removes it afterwards.
The same command runs twice: once as the job's setup step and once as its
post step, the two connected only by the runner's state file.

Main modules:
- lifecycle: setup and cleanup sequences
- buildx: command construction, install/build, inspect
- rules: version ranges and capability gates
- context: inputs of a run
- state: state shared between setup and cleanup
- outputs: step outputs
- engine: the host Docker engine
- auth: TLS credentials for remote endpoints
- utils: logging and process execution

Quick start example:
```python
from buildxsetup import BuilderLifecycle, StateStore, OutputPublisher, DockerEngine, BuildxTool, Executor, get_inputs

executor = Executor()
lifecycle = BuilderLifecycle(StateStore(), OutputPublisher(), executor, DockerEngine(), BuildxTool(executor))
lifecycle.run(get_inputs)
```
"""

__version__ = "0.3.0"

from .constants import Driver, StateKey
from .context import Inputs, get_inputs
from .state import StateStore
from .outputs import OutputPublisher
from .engine import DockerEngine
from .buildx import BuildxTool, ExecutionMode, get_command
from .lifecycle import BuilderLifecycle
from .utils import Executor, Command
from .exceptions import (
    BuildxSetupError,
    ConfigurationError,
    ConfigValidationError,
    UnsupportedModeError,
    ExternalCommandError,
    DiagnosticError,
    StateError,
)

__all__ = [
    # Version
    '__version__',
    # Inputs
    'Driver',
    'Inputs',
    'get_inputs',
    # State and outputs
    'StateKey',
    'StateStore',
    'OutputPublisher',
    # Collaborators
    'DockerEngine',
    'BuildxTool',
    'ExecutionMode',
    'get_command',
    'Executor',
    'Command',
    # Lifecycle
    'BuilderLifecycle',
    # Exceptions
    'BuildxSetupError',
    'ConfigurationError',
    'ConfigValidationError',
    'UnsupportedModeError',
    'ExternalCommandError',
    'DiagnosticError',
    'StateError',
]
