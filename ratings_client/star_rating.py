import math
from enum import Enum
from typing import Any, Callable, List, Optional

MAX_STARS = 5
FILLED = "★"
EMPTY = "☆"


class StarSize(str, Enum):
    SMALL = "sm"
    LARGE = "lg"


def round_half_up(value: Optional[float]) -> int:
    """Round an average for star display; 2.5 shows three stars."""
    if not value:
        return 0
    return int(math.floor(value + 0.5))


def format_rating(value: Optional[float]) -> str:
    return f"{(value or 0.0):.1f}"


class StarRating:
    """A row of five stars bound to an integer value, 0 meaning unset.

    Clicking star ``i`` (1-indexed) hands ``i`` to ``on_change`` and returns
    whatever the callback returns. Read-only widgets, or widgets without a
    callback, ignore clicks. The widget never changes its own value; the owner
    passes the new value in once it is confirmed.
    """

    def __init__(
        self,
        value: int = 0,
        on_change: Optional[Callable[[int], Any]] = None,
        read_only: bool = False,
        size: StarSize = StarSize.SMALL,
    ):
        if not 0 <= value <= MAX_STARS:
            raise ValueError(f"rating value must be between 0 and {MAX_STARS}, got {value}")
        self.value = value
        self.on_change = on_change
        self.read_only = read_only
        self.size = size
        self.hovered: Optional[int] = None

    @property
    def interactive(self) -> bool:
        return not self.read_only and self.on_change is not None

    def click(self, star: int) -> Any:
        if not 1 <= star <= MAX_STARS:
            raise ValueError(f"star must be between 1 and {MAX_STARS}, got {star}")
        if not self.interactive:
            return None
        return self.on_change(star)

    def hover(self, star: Optional[int]) -> None:
        if self.interactive:
            self.hovered = star

    @property
    def stars(self) -> List[bool]:
        shown = self.hovered if self.hovered is not None else self.value
        return [i <= shown for i in range(1, MAX_STARS + 1)]

    def render(self) -> str:
        return "".join(FILLED if filled else EMPTY for filled in self.stars)

    def __str__(self) -> str:
        return self.render()
