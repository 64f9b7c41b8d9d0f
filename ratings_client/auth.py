import logging
from typing import Optional

from ratings_client.api import ApiClient, ApiError
from ratings_client.mutation import Mutation
from ratings_client.notifications import Toaster
from ratings_client.query_cache import QueryClient
from schemas import ChangePasswordForm, LoginForm, MessageResponse, TokenResponse, UserForm, UserOut, UserRole

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "/api/user"


class AuthSession:
    """The signed-in user, the bearer token and the auth mutations."""

    def __init__(self, api: ApiClient, query_client: QueryClient, toaster: Toaster):
        self.api = api
        self.query_client = query_client
        self.toaster = toaster
        self.login_mutation = Mutation(self._login, on_success=self._signed_in, on_error=self._login_failed)
        self.register_mutation = Mutation(self._register, on_success=self._signed_in, on_error=self._register_failed)
        self.change_password_mutation = Mutation(
            self._change_password,
            on_success=self._password_changed,
            on_error=self._password_change_failed,
        )

    @property
    def user(self) -> Optional[UserOut]:
        return self.query_client.get_query_data(CURRENT_USER_KEY)

    @property
    def role(self) -> Optional[UserRole]:
        return self.user.role if self.user else None

    async def load_user(self) -> Optional[UserOut]:
        if not self.api.token:
            return None
        try:
            return await self.query_client.fetch_query(CURRENT_USER_KEY, UserOut)
        except ApiError as exc:
            if exc.status_code == 401:
                self.logout()
                return None
            raise

    async def _login(self, form: LoginForm) -> TokenResponse:
        return await self.api.post("/api/login", form, TokenResponse)

    async def _register(self, form: UserForm) -> TokenResponse:
        return await self.api.post("/api/register", form, TokenResponse)

    async def _change_password(self, form: ChangePasswordForm) -> MessageResponse:
        return await self.api.post("/api/change-password", form.to_request(), MessageResponse)

    def _signed_in(self, result: TokenResponse) -> None:
        self.api.token = result.access_token
        self.query_client.set_query_data(CURRENT_USER_KEY, result.user, UserOut)
        logger.info("Signed in as %s (%s)", result.user.email, result.user.role.value)

    def _login_failed(self, error: ApiError) -> None:
        self.toaster.error("Login failed", error.message)

    def _register_failed(self, error: ApiError) -> None:
        self.toaster.error("Registration failed", error.message)

    def _password_changed(self, result: MessageResponse) -> None:
        self.toaster.toast("Password updated", "Your password has been changed successfully.")

    def _password_change_failed(self, error: ApiError) -> None:
        self.toaster.error("Failed to update password", error.message)

    async def login(self, form: LoginForm) -> Optional[TokenResponse]:
        return await self.login_mutation.mutate(form)

    async def register(self, form: UserForm) -> Optional[TokenResponse]:
        return await self.register_mutation.mutate(form)

    async def change_password(self, form: ChangePasswordForm) -> Optional[MessageResponse]:
        return await self.change_password_mutation.mutate(form)

    def logout(self) -> None:
        self.api.token = None
        self.query_client.clear()
