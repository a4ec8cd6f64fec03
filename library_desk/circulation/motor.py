"""
Motor command mailbox.

A single overwritable slot between the librarian console and the shelf
motor controller.  The console writes a move or stop command; the controller
polls and takes whatever is in the slot, which resets it to the neutral
command.  A command written before the previous one was taken replaces it.
"""

import logging
import threading

from library_desk.circulation.errors import InvalidArgument
from library_desk.circulation.models import NEUTRAL_COMMAND, MotorCommand

logger = logging.getLogger(__name__)


class MotorMailbox:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: MotorCommand = NEUTRAL_COMMAND

    def enqueue_move(self, steps: int) -> MotorCommand:
        """Replace the pending command with a move of *steps* (signed, non-zero)."""
        if isinstance(steps, bool) or not isinstance(steps, int) or steps == 0:
            raise InvalidArgument("steps must be non-zero number")
        command = MotorCommand(steps=steps, stop=False)
        with self._lock:
            self._pending = command
        logger.info("Queued move: %d step(s)", steps)
        return command

    def enqueue_stop(self) -> MotorCommand:
        command = MotorCommand(steps=0, stop=True)
        with self._lock:
            self._pending = command
        logger.info("Queued STOP")
        return command

    def take_and_reset(self) -> MotorCommand:
        """Return the pending command and leave the neutral command in its place."""
        with self._lock:
            command, self._pending = self._pending, NEUTRAL_COMMAND
        if command != NEUTRAL_COMMAND:
            logger.debug("Delivered motor command %s", command)
        return command
