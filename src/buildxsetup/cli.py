import click
import functools
import logging
import traceback

from .context import get_inputs
from .engine import DockerEngine
from .buildx import BuildxTool
from .lifecycle import BuilderLifecycle
from .outputs import OutputPublisher
from .state import StateStore
from .utils import Executor, parse_module_levels, runner_debug, setup_logger
from .exceptions import (
    BuildxSetupError,
    ConfigurationError,
    ExternalCommandError,
    StateError,
)
from . import __version__


def setup_logging(debug: bool, log_levels: str = None, log_file: str = None):
    """Setup logger with debug and module-level configuration"""
    setup_logger(debug=debug, module_levels=parse_module_levels(log_levels), log_file=log_file)


def handle_errors(func):
    """Decorator reporting failures once, at the top, and exiting non-zero"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            _fail(f"Configuration error: {e}")
        except ExternalCommandError as e:
            _fail(f"Command error: {e}")
        except StateError as e:
            _fail(f"State error: {e}")
        except BuildxSetupError as e:
            _fail(f"An unexpected application error occurred: {e}")
        except FileNotFoundError as e:
            _fail(f"A required file was not found: {e}")
        except Exception as e:
            _fail(f"An unexpected error occurred: {e}")
    return wrapper


def _fail(message: str):
    logging.error(message)
    ctx = click.get_current_context()
    if ctx.obj.get('debug'):
        traceback.print_exc()
    ctx.exit(1)


def build_lifecycle(ctx) -> BuilderLifecycle:
    """Wire the lifecycle to the real runner, Docker and buildx"""
    executor = Executor()
    return BuilderLifecycle(
        state=StateStore(ctx.obj.get('state_file')),
        outputs=OutputPublisher(ctx.obj.get('output_file')),
        executor=executor,
        engine=DockerEngine(),
        tool=BuildxTool(executor),
        job_debug=ctx.obj.get('debug', False) or runner_debug(),
    )


@handle_errors
def do_run(ctx):
    """Execute setup or cleanup depending on the phase marker"""
    lifecycle = build_lifecycle(ctx)
    lifecycle.run(lambda: get_inputs(inputs_file=ctx.obj.get('inputs_file')))


@handle_errors
def do_setup(ctx):
    """Execute setup"""
    lifecycle = build_lifecycle(ctx)
    lifecycle.setup(get_inputs(inputs_file=ctx.obj.get('inputs_file')))


def do_cleanup(ctx):
    """Execute cleanup; never fails the job"""
    try:
        build_lifecycle(ctx).cleanup()
    except Exception as e:
        logging.warning(f"Cleanup could not run: {e}")
        if ctx.obj.get('debug'):
            traceback.print_exc()


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'lc=DEBUG,tool=INFO')")
@click.option('-f', '--log-file', help='Path to log file')
@click.option('-s', '--state-file', envvar='BXS_STATE_FILE', help='File holding the state shared by setup and cleanup')
@click.option('-o', '--output-file', envvar='BXS_OUTPUT_FILE', help='File receiving step outputs')
@click.option('-i', '--inputs', 'inputs_file', type=click.Path(dir_okay=False), help='YAML file with inputs (overrides INPUT_* env)')
@click.version_option(version=__version__, prog_name='buildxsetup')
@click.pass_context
def cli(ctx, debug, log_levels, log_file, state_file, output_file, inputs_file):
    """Buildx Setup - create a buildx builder for a CI job and remove it afterwards

    \b
    Examples:
      bxs                         Setup, or cleanup in the post step
      bxs -i inputs.yml setup     Setup with inputs from a YAML file
      bxs -s state.txt cleanup    Cleanup using a local state file
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    ctx.obj['state_file'] = state_file
    ctx.obj['output_file'] = output_file
    ctx.obj['inputs_file'] = inputs_file
    setup_logging(debug or runner_debug(), log_levels, log_file)
    if ctx.invoked_subcommand is None:
        do_run(ctx)


@cli.command()
@click.pass_context
def run(ctx):
    """Run setup, or cleanup when this is the post-job invocation"""
    do_run(ctx)


@cli.command()
@click.pass_context
def setup(ctx):
    """Create, boot and inspect a builder

    \b
    This command will:
      1. Detect whether Docker is reachable (otherwise run standalone)
      2. Install or build buildx when needed
      3. Create and boot the builder, then publish its outputs
    """
    do_setup(ctx)


@cli.command()
@click.pass_context
def cleanup(ctx):
    """Remove the builder and credentials recorded by setup"""
    do_cleanup(ctx)
