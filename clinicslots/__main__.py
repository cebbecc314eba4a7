"""
Convenience entry point for running clinicslots directly.

Usage: python -m clinicslots [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
