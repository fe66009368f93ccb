# ==============================================================
# turn_timer.py - Per-turn countdown driven by an external tick
# ==============================================================

from loguru import logger

TURN_TIME_LIMIT = 90  # seconds


class TurnTimer:
    """
    Countdown owned by the turn state machine.

    Something outside the engine (a scheduler, an HTTP poll, a test) calls
    tick(); when the remaining time hits zero `on_expire` is invoked once
    and the timer stops until the next reset().
    """

    def __init__(self, limit=TURN_TIME_LIMIT, on_expire=None):
        self.limit = limit
        self.remaining = limit
        self.running = False
        self.on_expire = on_expire

    def reset(self):
        self.remaining = self.limit
        self.running = True

    def stop(self):
        self.running = False

    def tick(self, seconds=1):
        """
        Advance the countdown. Returns True if this tick expired the timer.

        Non-positive ticks are ignored; the countdown never moves back up.
        """
        if not self.running or seconds <= 0:
            return False

        self.remaining = max(0, self.remaining - seconds)
        if self.remaining > 0:
            return False

        self.running = False
        logger.debug("Turn timer expired")
        if self.on_expire is not None:
            self.on_expire()
        return True
