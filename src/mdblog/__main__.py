"""Entry point for running mdblog as a module.

Usage:
    python -m mdblog [command] [options]

Example:
    python -m mdblog dev --port 3000
    python -m mdblog build
"""

from mdblog.cli import app

if __name__ == "__main__":
    app()
