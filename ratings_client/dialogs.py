"""Add Store and Add User dialogs.

A dialog goes idle -> submitting -> idle. Success closes it with an empty form;
failure leaves it open with the entered values. At most one submission is in
flight per dialog, and that submission belongs to the dialog: closing the
dialog cancels it and its callbacks never run.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel

from ratings_client.api import ApiClient, ApiError
from ratings_client.forms import Form
from ratings_client.mutation import Mutation
from ratings_client.notifications import Toaster
from ratings_client.query_cache import QueryClient
from schemas import StoreForm, StoreWithRating, UserForm, UserOut, UserRole

logger = logging.getLogger(__name__)

USERS_KEY = "/api/admin/users"
STORES_KEY = "/api/admin/stores"
STATISTICS_KEY = "/api/admin/statistics"


class EntityDialog:
    endpoint: str
    schema: Type[BaseModel]
    response_type: Any
    invalidates: Sequence[str] = ()
    submit_label = "Save"
    pending_label = "Saving..."
    success_title = "Saved"
    success_description = ""
    failure_title = "Failed to save"

    def __init__(self, api: ApiClient, query_client: QueryClient, toaster: Toaster):
        self.api = api
        self.query_client = query_client
        self.toaster = toaster
        self.is_open = False
        self.submitting = False
        self.form = Form(self.schema, self.default_values())
        self.mutation = Mutation(self._create, on_success=self._on_success, on_error=self._on_error)
        self._submission: Optional[asyncio.Task] = None

    def default_values(self) -> Dict[str, Any]:
        return {name: "" for name in self.schema.model_fields}

    @property
    def submit_disabled(self) -> bool:
        return self.submitting or self.mutation.is_pending

    @property
    def button_label(self) -> str:
        return self.pending_label if self.submit_disabled else self.submit_label

    async def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        submission = self._submission
        if submission is not None and not submission.done():
            submission.cancel()
            # the server may already have applied the write
            self.query_client.invalidate_queries(*self.invalidates)
        self._submission = None
        self.submitting = False
        self.is_open = False

    def validate(self) -> Optional[BaseModel]:
        return self.form.validate()

    async def submit(self) -> Any:
        if self.submit_disabled or not self.is_open:
            return None
        payload = self.validate()
        if payload is None:
            return None
        self.submitting = True
        submission = self._submission = asyncio.ensure_future(self.mutation.mutate(payload))
        try:
            return await submission
        except asyncio.CancelledError:
            if submission.cancelled() and not self.is_open:
                logger.info("%s closed while submitting; result discarded", type(self).__name__)
                return None
            raise
        finally:
            if self._submission is submission:
                self._submission = None
                self.submitting = False

    async def _create(self, payload: BaseModel) -> Any:
        return await self.api.post(self.endpoint, payload, self.response_type)

    def _on_success(self, created: Any) -> None:
        self.query_client.invalidate_queries(*self.invalidates)
        self.toaster.toast(self.success_title, self.success_description)
        self.form.reset()
        self._submission = None
        self.submitting = False
        self.is_open = False

    def _on_error(self, error: ApiError) -> None:
        self.toaster.error(self.failure_title, error.message)


class AddStoreDialog(EntityDialog):
    endpoint = STORES_KEY
    schema = StoreForm
    response_type = StoreWithRating
    invalidates = (STORES_KEY, STATISTICS_KEY)
    title = "Add New Store"
    submit_label = "Add Store"
    pending_label = "Adding..."
    success_title = "Store created"
    success_description = "The store has been created successfully."
    failure_title = "Failed to create store"
    no_owners_message = "No store owners available. Create one in Users."

    def __init__(self, api: ApiClient, query_client: QueryClient, toaster: Toaster):
        super().__init__(api, query_client, toaster)
        self.loading_owners = False
        self.owners_error: Optional[str] = None

    def default_values(self) -> Dict[str, Any]:
        return {"name": "", "email": "", "address": "", "owner_id": None}

    async def open(self) -> None:
        await super().open()
        await self.load_owners()

    async def load_owners(self) -> None:
        # owners are only fetched while the dialog is open
        if not self.is_open:
            return
        self.loading_owners = True
        try:
            await self.query_client.fetch_query(USERS_KEY, List[UserOut])
            self.owners_error = None
        except ApiError as exc:
            self.owners_error = exc.message
        finally:
            self.loading_owners = False

    @property
    def owners(self) -> List[UserOut]:
        users = self.query_client.get_query_data(USERS_KEY, [])
        return [user for user in users if user.role is UserRole.OWNER]

    @property
    def owner_options(self) -> List[tuple]:
        return [(owner.id, f"{owner.name} ({owner.email})") for owner in self.owners]

    @property
    def owner_hint(self) -> Optional[str]:
        if not self.is_open or self.loading_owners:
            return None
        if self.owners_error is not None:
            return self.owners_error
        if not self.owners:
            return self.no_owners_message
        return None

    def validate(self) -> Optional[BaseModel]:
        payload = self.form.validate()
        if payload is None:
            return None
        if payload.owner_id not in {owner.id for owner in self.owners}:
            self.form.errors["owner_id"] = "Select a valid store owner"
            return None
        return payload


class AddUserDialog(EntityDialog):
    endpoint = USERS_KEY
    schema = UserForm
    response_type = UserOut
    invalidates = (USERS_KEY, STORES_KEY, STATISTICS_KEY)
    submit_label = "Create User"
    pending_label = "Creating..."
    success_title = "User created"
    success_description = "The user has been created successfully."
    failure_title = "Failed to create user"

    def __init__(self, api: ApiClient, query_client: QueryClient, toaster: Toaster, default_role: UserRole = UserRole.USER):
        self.default_role = default_role
        super().__init__(api, query_client, toaster)

    def default_values(self) -> Dict[str, Any]:
        return {"name": "", "email": "", "address": "", "password": "", "role": self.default_role}

    @property
    def title(self) -> str:
        if self.default_role is UserRole.OWNER:
            return "Add Store Owner"
        return "Add New User"

    @property
    def description(self) -> str:
        if self.default_role is UserRole.OWNER:
            return "Create a new store owner. You'll be able to assign them a store afterward."
        return "Fill in the details below to create a new user in the system."
