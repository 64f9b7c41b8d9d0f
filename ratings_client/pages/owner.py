from datetime import datetime, timezone
from typing import List, Optional

from ratings_client.pages.base import Page
from ratings_client.star_rating import StarRating, StarSize, format_rating, round_half_up
from ratings_client.table import Column, SortableTable
from schemas import RatingWithUser, StoreWithRating

OWNER_STORE_KEY = "/api/owner/store"
OWNER_RATINGS_KEY = "/api/owner/ratings"
MINUTES_IN_DAY = 1440
MINUTES_IN_MONTH = 43200


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''}"


def time_ago(moment: datetime, now: Optional[datetime] = None) -> str:
    """Relative time such as "5 minutes ago" or "about 3 hours ago".

    Buckets follow date-fns ``formatDistanceToNow``: every threshold is in
    whole minutes and halves round up.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = max((now - moment).total_seconds(), 0)
    minutes = round_half_up(seconds / 60)
    if minutes < 1:
        return "less than a minute ago"
    if minutes < 45:
        return f"{_plural(minutes, 'minute')} ago"
    if minutes < 90:
        return "about 1 hour ago"
    if minutes < MINUTES_IN_DAY:
        return f"about {_plural(round_half_up(minutes / 60), 'hour')} ago"
    if minutes < 2520:
        return "1 day ago"
    if minutes < MINUTES_IN_MONTH:
        return f"{_plural(round_half_up(minutes / MINUTES_IN_DAY), 'day')} ago"
    if minutes < 2 * MINUTES_IN_MONTH:
        return f"about {_plural(round_half_up(minutes / MINUTES_IN_MONTH), 'month')} ago"
    months = minutes // MINUTES_IN_MONTH
    if months < 12:
        return f"{_plural(round_half_up(minutes / MINUTES_IN_MONTH), 'month')} ago"
    years, remainder = divmod(months, 12)
    if remainder < 3:
        return f"about {_plural(years, 'year')} ago"
    if remainder < 9:
        return f"over {_plural(years, 'year')} ago"
    return f"almost {_plural(years + 1, 'year')} ago"


class OwnerDashboardPage(Page):
    queries = {
        OWNER_STORE_KEY: StoreWithRating,
        OWNER_RATINGS_KEY: List[RatingWithUser],
    }
    load_error_message = "Failed to load store information. Please refresh."

    def __init__(self, api, query_client, toaster):
        super().__init__(api, query_client, toaster)
        self.table = SortableTable(
            [
                Column("Customer", "user_name", sortable=True, render=self.customer_cell),
                Column("Rating", "rating", sortable=True, render=self.rating_cell),
                Column("Date", "created_at", sortable=True, render=lambda rating: time_ago(rating.created_at)),
            ]
        )

    @staticmethod
    def customer_cell(rating: RatingWithUser) -> str:
        return f"{rating.user_name or 'Unknown'} <{rating.user_email or ''}>"

    @staticmethod
    def rating_cell(rating: RatingWithUser) -> str:
        return f"{format_rating(rating.rating)} {StarRating(rating.rating, read_only=True)}"

    @property
    def store(self) -> Optional[StoreWithRating]:
        return self.data(OWNER_STORE_KEY)

    @property
    def ratings(self) -> List[RatingWithUser]:
        return self.data(OWNER_RATINGS_KEY, [])

    def summary(self) -> str:
        store = self.store
        if store is None:
            return "Loading store information..."
        stars = StarRating(round_half_up(store.average_rating), read_only=True, size=StarSize.LARGE)
        return f"{store.name}: {format_rating(store.average_rating)} {stars} ({store.total_ratings} ratings)"

    def render_table(self) -> List[List[str]]:
        return self.table.render(self.ratings)
