from typing import Dict, List, Optional, Union

from ratings_client.dialogs import STATISTICS_KEY, STORES_KEY, USERS_KEY, AddStoreDialog, AddUserDialog
from ratings_client.pages.base import Page
from ratings_client.roles import ROLE_FILTER_LABELS, role_badge, role_label
from ratings_client.star_rating import StarRating, format_rating, round_half_up
from ratings_client.table import Column, SortableTable, search_filter
from schemas import StoreStatistics, StoreWithRating, UserOut, UserRole

ALL_ROLES = "all"


def rating_cell(average: Optional[float], total: Optional[int] = None) -> str:
    cell = f"{format_rating(average)} {StarRating(round_half_up(average), read_only=True)}"
    if total is not None:
        cell += f" ({total})"
    return cell


class AdminDashboardPage(Page):
    queries = {STATISTICS_KEY: StoreStatistics}

    def __init__(self, api, query_client, toaster):
        super().__init__(api, query_client, toaster)
        self.add_store_dialog = AddStoreDialog(api, query_client, toaster)
        self.add_user_dialog = AddUserDialog(api, query_client, toaster)

    @property
    def statistics(self) -> Optional[StoreStatistics]:
        return self.data(STATISTICS_KEY)

    @property
    def cards(self) -> Dict[str, str]:
        stats = self.statistics
        if stats is None:
            return {"Total Users": "...", "Total Stores": "...", "Total Ratings": "..."}
        return {
            "Total Users": str(stats.total_users),
            "Total Stores": str(stats.total_stores),
            "Total Ratings": str(stats.total_ratings),
        }


class AdminStoresPage(Page):
    queries = {STORES_KEY: List[StoreWithRating]}
    load_error_message = "Failed to load store data. Please refresh."
    search_fields = ("name", "email", "address")

    def __init__(self, api, query_client, toaster):
        super().__init__(api, query_client, toaster)
        self.search_query = ""
        self.selected: Optional[StoreWithRating] = None
        self.add_store_dialog = AddStoreDialog(api, query_client, toaster)
        self.add_owner_dialog = AddUserDialog(api, query_client, toaster, default_role=UserRole.OWNER)
        self.table = SortableTable(
            [
                Column("Name", "name", sortable=True),
                Column("Email", "email", sortable=True),
                Column("Address", "address", sortable=True),
                Column(
                    "Rating",
                    "average_rating",
                    sortable=True,
                    render=lambda store: rating_cell(store.average_rating, store.total_ratings),
                ),
            ],
            on_row_click=self.select,
        )

    def select(self, store: StoreWithRating) -> None:
        self.selected = store

    @property
    def stores(self) -> List[StoreWithRating]:
        return self.data(STORES_KEY, [])

    @property
    def filtered_stores(self) -> List[StoreWithRating]:
        return search_filter(self.stores, self.search_query, self.search_fields)

    def render_table(self) -> List[List[str]]:
        return self.table.render(self.filtered_stores)


class AdminUsersPage(Page):
    queries = {USERS_KEY: List[UserOut]}
    load_error_message = "Failed to load users. Please refresh."
    search_fields = ("name", "email", "address")

    def __init__(self, api, query_client, toaster):
        super().__init__(api, query_client, toaster)
        self.search_query = ""
        self.role_filter: Union[UserRole, str] = ALL_ROLES
        self.selected: Optional[UserOut] = None
        self.add_user_dialog = AddUserDialog(api, query_client, toaster)
        self.table = SortableTable(
            [
                Column("Name", "name", sortable=True),
                Column("Email", "email", sortable=True),
                Column("Address", "address", sortable=True),
                Column("Role", "role", sortable=True, render=lambda user: role_label(user.role)),
                Column("Store Rating", "store_rating", render=self.store_rating_cell),
            ],
            on_row_click=self.select,
        )

    @staticmethod
    def store_rating_cell(user: UserOut) -> str:
        if user.role is not UserRole.OWNER or not user.store_rating:
            return "N/A"
        return rating_cell(user.store_rating)

    @staticmethod
    def role_filter_options() -> Dict[str, str]:
        options = {ALL_ROLES: "All Roles"}
        options.update((role.value, label) for role, label in ROLE_FILTER_LABELS.items())
        return options

    def set_role_filter(self, value: Union[UserRole, str]) -> None:
        self.role_filter = ALL_ROLES if value == ALL_ROLES else UserRole(value)

    def select(self, user: UserOut) -> None:
        self.selected = user

    @property
    def users(self) -> List[UserOut]:
        return self.data(USERS_KEY, [])

    @property
    def filtered_users(self) -> List[UserOut]:
        matches = search_filter(self.users, self.search_query, self.search_fields)
        if self.role_filter == ALL_ROLES:
            return matches
        return [user for user in matches if user.role is self.role_filter]

    def badge(self, user: UserOut) -> str:
        return role_badge(user.role)

    def render_table(self) -> List[List[str]]:
        return self.table.render(self.filtered_users)
