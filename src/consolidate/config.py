"""Configuration types for the consolidate library."""

from dataclasses import dataclass
from enum import StrEnum


class TrailingPolicy(StrEnum):
    """What happens to an armed trailing timer when the ceiling timer fires.

    DISARM: The trailing timer is cancelled together with the ceiling,
            so a ceiling fire is never followed by a redundant event.
    KEEP:   The trailing timer is left running. If no further events
            arrive it elapses shortly after and fires a second event.
    """

    DISARM = "disarm"
    KEEP = "keep"


class FireMode(StrEnum):
    """Which timer produced a consolidated event.

    QUIET:   The origin stream went quiet for ``delay``.
    CEILING: A burst lasted ``max_delay`` without a quiet gap.
    """

    QUIET = "quiet"
    CEILING = "ceiling"


@dataclass(frozen=True, slots=True)
class ConsolidateConfig:
    """Configuration for a Consolidator instance.

    Attributes:
        delay: Quiet period in seconds. A consolidated event fires this long
               after the last origin event of a burst.
        max_delay: Ceiling in seconds, measured from the first origin event
                   of a burst. Bounds the spacing of consolidated events
                   under continuous input. Must be greater than ``delay``.
        trailing: Policy for the trailing timer when the ceiling fires.
    """

    delay: float = 0.1
    max_delay: float = 0.5
    trailing: TrailingPolicy = TrailingPolicy.DISARM

    def __post_init__(self) -> None:
        if self.delay <= 0:
            raise ValueError(f"delay must be positive, got {self.delay}")

        if self.max_delay <= 0:
            raise ValueError(f"max_delay must be positive, got {self.max_delay}")

        if self.max_delay <= self.delay:
            raise ValueError(f"max_delay ({self.max_delay}) must be > delay ({self.delay})")

        object.__setattr__(self, "trailing", TrailingPolicy(self.trailing))
