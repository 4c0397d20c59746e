"""
Convenience entry point for running timewise as a module.

Usage: python -m timewise [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
