"""
InteractionManager - operator confirmation for irreversible actions.
"""

import logging
from typing import Optional, TextIO

from rich.console import Console
from rich.prompt import Confirm


logger = logging.getLogger(__name__)


class InteractionManager:
    """
    Asks yes/no questions on the console.

    The answer is read from `stream` (stdin by default), one line per
    question, without timeout. An empty answer or end of input means 'no'.
    """

    def __init__(self, console: Optional[Console] = None, stream: Optional[TextIO] = None):
        self.console = console or Console()
        self.stream = stream

    def confirm(self, question: str) -> bool:
        try:
            answer = Confirm.ask(
                f"{question}?",
                console=self.console,
                default=False,
                stream=self.stream,
            )
        except EOFError:
            self.console.print()
            logger.info("no answer to '%s', end of input", question)
            return False
        logger.debug("answer to '%s': %s", question, answer)
        return answer
