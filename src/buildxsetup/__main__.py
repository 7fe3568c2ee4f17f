"""
Buildx Setup - Main entry point

`python -m buildxsetup` behaves like `bxs`: setup, or cleanup in the post step.
"""

from .cli import cli

if __name__ == "__main__":
    cli()
