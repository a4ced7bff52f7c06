import logging
from enum import Enum

from colorbar.core.errors import ConfigError

logger = logging.getLogger(__name__)


class MatchState(Enum):
    IDLE = "idle"
    CANDIDATE = "candidate"
    CONFIRMED = "confirmed"


class MatchSmoother:
    """Requires ``confirm_frames`` consecutive matches before confirming.

    IDLE -> CANDIDATE(count) -> CONFIRMED on matches; any miss returns to IDLE.
    """

    def __init__(self, confirm_frames: int = 1):
        if isinstance(confirm_frames, bool) or not isinstance(confirm_frames, int) or confirm_frames < 1:
            raise ConfigError(f"confirm_frames must be a positive integer, got {confirm_frames!r}")
        self.confirm_frames = confirm_frames
        self.state = MatchState.IDLE
        self.count = 0

    @property
    def confirmed(self) -> bool:
        return self.state is MatchState.CONFIRMED

    def update(self, matched: bool) -> bool:
        """Feed one per-frame decision; return whether a match is confirmed."""
        was_confirmed = self.confirmed
        if not matched:
            self.state = MatchState.IDLE
            self.count = 0
        elif self.state is not MatchState.CONFIRMED:
            self.count += 1
            if self.count >= self.confirm_frames:
                self.state = MatchState.CONFIRMED
            else:
                self.state = MatchState.CANDIDATE

        if self.confirmed and not was_confirmed:
            logger.info("Reference match confirmed after %d frame(s)", self.count)
        elif was_confirmed and not self.confirmed:
            logger.info("Reference match ended")
        return self.confirmed

    def reset(self) -> None:
        self.state = MatchState.IDLE
        self.count = 0
