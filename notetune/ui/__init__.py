"""
UI module - Rich console output and operator prompts.
"""

from .console import ConsoleUI
from .interaction import InteractionManager

__all__ = [
    "ConsoleUI",
    "InteractionManager",
]
