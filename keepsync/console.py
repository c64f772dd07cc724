"""
Console collaborator: blocking prompts for the operator, plus a log sink.

Formatting (colors, timestamps) is left to the logging configuration.
"""

import sys
import logging

from .log import LEVELS

__all__ = ["Console"]

log = logging.getLogger(__name__)


class Console:
    """Interactive console used by providers and the syncer."""

    def prompt(self, text: str) -> str:     # pylint: disable=no-self-use
        """Blocking read of one line from the operator."""
        return input(text + " ")

    @staticmethod
    def log(level: str, text: str):
        log.log(LEVELS[level], text)

    def welcome(self, name: str, version: str):
        self.log("info", "%s %s" % (name, version))

    def confirm_and_exit(self, text: str, code: int = 1):
        """Report a fatal problem, wait for the operator to acknowledge it, then exit."""
        self.log("error", text)
        try:
            self.prompt("Press enter to exit.")
        except EOFError:
            pass
        sys.exit(code)
