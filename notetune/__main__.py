"""
Entry point for running notetune as a module.

Usage:
    python -m notetune staging status
"""

from .cli import main

if __name__ == "__main__":
    main()
