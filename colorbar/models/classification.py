from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome for one frame.

    ``distance`` is None when the frame could not be classified; ``error``
    then carries the reason and the frame counts as no match.
    """

    distance: Optional[int]
    is_match: bool
    confirmed: bool = False
    error: Optional[str] = None

    @property
    def classified(self) -> bool:
        return self.distance is not None

    @classmethod
    def unclassified(cls, error: str) -> "ClassificationResult":
        return cls(distance=None, is_match=False, confirmed=False, error=error)
