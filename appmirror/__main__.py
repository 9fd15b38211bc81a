"""
Run the CLI as a module.

Usage:
    python -m appmirror verify-apps
"""

from .main import cli

if __name__ == "__main__":
    cli()
