import logging
from typing import List, Optional, Tuple

from ratings_client.auth import AuthSession
from ratings_client.forms import Form
from ratings_client.mutation import Mutation
from ratings_client.pages.base import Page
from ratings_client.star_rating import StarRating, StarSize, format_rating, round_half_up
from ratings_client.table import Column, SortableTable, search_filter
from schemas import ChangePasswordForm, RatingForm, RatingWithUser, StoreWithRating

logger = logging.getLogger(__name__)

USER_STORES_KEY = "/api/user/stores"
STORES_KEY = "/api/stores"
RATINGS_KEY = "/api/ratings"
TOP_RATED_LIMIT = 5


class UserDashboardPage(Page):
    queries = {USER_STORES_KEY: List[StoreWithRating]}

    def __init__(self, api, query_client, toaster):
        super().__init__(api, query_client, toaster)
        self.table = SortableTable(
            [
                Column("Store Name", "name", sortable=True),
                Column("Address", "address"),
                Column("Rating", "average_rating", sortable=True, render=self.average_cell),
                Column("Your Rating", "user_rating", sortable=True, render=self.own_rating_cell),
            ]
        )

    @staticmethod
    def average_cell(store: StoreWithRating) -> str:
        if not store.average_rating:
            return "N/A"
        return f"{format_rating(store.average_rating)} {StarRating(round_half_up(store.average_rating), read_only=True)}"

    @staticmethod
    def own_rating_cell(store: StoreWithRating) -> str:
        if not store.user_rating:
            return "Not rated"
        return f"{format_rating(store.user_rating)} {StarRating(store.user_rating, read_only=True)}"

    @property
    def stores(self) -> List[StoreWithRating]:
        return self.data(USER_STORES_KEY, [])

    @property
    def top_rated_stores(self) -> List[StoreWithRating]:
        return sorted(self.stores, key=lambda store: store.average_rating or 0, reverse=True)[:TOP_RATED_LIMIT]

    @property
    def totals(self) -> Tuple[int, int, int]:
        """(total stores, stores the viewer rated, unrated stores)"""
        rated = sum(1 for store in self.stores if store.user_rating)
        return len(self.stores), rated, len(self.stores) - rated

    def render_table(self) -> List[List[str]]:
        return self.table.render(self.stores)


class StoreCard:
    def __init__(self, store: StoreWithRating, page: "UserStoresPage"):
        self.store = store
        self.average = StarRating(round_half_up(store.average_rating), read_only=True)
        self.own_rating = StarRating(
            store.user_rating or 0,
            on_change=lambda value: page.rate(store.id, value),
            size=StarSize.LARGE,
        )

    def render(self) -> List[str]:
        return [
            self.store.name,
            self.store.address,
            f"{format_rating(self.store.average_rating)} {self.average} ({self.store.total_ratings} ratings)",
            f"Your rating: {self.own_rating}",
        ]


class UserStoresPage(Page):
    """Store browsing with the rating flow.

    A star click posts the rating; the card only shows the new value after the
    store list has been refetched.
    """

    queries = {STORES_KEY: List[StoreWithRating]}
    search_fields = ("name", "address")
    empty_message = "No stores found matching your search criteria."

    def __init__(self, api, query_client, toaster):
        super().__init__(api, query_client, toaster)
        self.search_query = ""
        self.rating_mutation = Mutation(self._submit_rating, on_success=self._rated, on_error=self._rating_failed)

    @property
    def stores(self) -> List[StoreWithRating]:
        return self.data(STORES_KEY, [])

    @property
    def filtered_stores(self) -> List[StoreWithRating]:
        return search_filter(self.stores, self.search_query, self.search_fields)

    @property
    def cards(self) -> List[StoreCard]:
        return [StoreCard(store, self) for store in self.filtered_stores]

    def card(self, store_id: str) -> StoreCard:
        for store in self.stores:
            if store.id == store_id:
                return StoreCard(store, self)
        raise KeyError(store_id)

    async def rate(self, store_id: str, rating: int) -> Optional[RatingWithUser]:
        return await self.rating_mutation.mutate(RatingForm(store_id=store_id, rating=rating))

    async def _submit_rating(self, form: RatingForm) -> RatingWithUser:
        return await self.api.post(RATINGS_KEY, form, RatingWithUser)

    def _rated(self, rating: RatingWithUser) -> None:
        self.query_client.invalidate_queries(STORES_KEY, USER_STORES_KEY)
        self.toaster.toast("Rating submitted", "Your rating has been submitted successfully.")

    def _rating_failed(self, error) -> None:
        self.toaster.error("Failed to submit rating", error.message)

    def render(self) -> List[List[str]]:
        cards = self.cards
        if not cards:
            return [[self.empty_message]]
        return [card.render() for card in cards]


class UserProfilePage:
    def __init__(self, session: AuthSession):
        self.session = session
        self.form = Form(ChangePasswordForm, {"current_password": "", "new_password": "", "confirm_password": ""})

    @property
    def details(self) -> List[Tuple[str, str]]:
        user = self.session.user
        if user is None:
            return []
        return [("Full name", user.name), ("Email address", user.email), ("Address", user.address)]

    @property
    def submit_disabled(self) -> bool:
        return self.session.change_password_mutation.is_pending

    async def submit(self):
        form = self.form.validate()
        if form is None:
            return None
        result = await self.session.change_password(form)
        if result is not None:
            self.form.reset()
        return result
