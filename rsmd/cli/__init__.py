"""CLI module for rsmd.

Provides the ``rsmd`` command. Options can be given as arguments or as
environment variables.
"""

from .main import (
    Config,
    build_config,
    cli,
    evaluate_boolean,
    main,
)

__all__ = [
    "cli",
    "main",
    "Config",
    "build_config",
    "evaluate_boolean",
]
