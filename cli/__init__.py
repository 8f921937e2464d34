"""CLI package for VVCode Auth

This package provides a command-line front-end for the VVCode login flow,
group switching and remote configuration.
"""

from cli.main import main

__all__ = [
    "main",
]
