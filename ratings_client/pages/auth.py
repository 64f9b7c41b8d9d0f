from typing import Optional

from ratings_client.auth import AuthSession
from ratings_client.forms import Form
from ratings_client.roles import home_path
from schemas import LoginForm, TokenResponse, UserForm, UserRole

LOGIN_TAB = "login"
REGISTER_TAB = "register"


class AuthPage:
    """Login and registration tabs.

    After a successful sign-in ``redirect`` holds the home route of the user's
    role; a failed attempt keeps the entered values in the form.
    """

    def __init__(self, session: AuthSession):
        self.session = session
        self.active_tab = LOGIN_TAB
        self.redirect: Optional[str] = None
        self.login_form = Form(LoginForm, {"email": "", "password": ""})
        self.register_form = Form(
            UserForm,
            {"name": "", "email": "", "address": "", "password": "", "role": UserRole.USER},
        )

    async def load(self) -> None:
        user = await self.session.load_user()
        if user is not None:
            self.redirect = home_path(user.role)

    def switch_tab(self, tab: str) -> None:
        if tab not in (LOGIN_TAB, REGISTER_TAB):
            raise ValueError(f"unknown tab {tab!r}")
        self.active_tab = tab

    @property
    def login_pending(self) -> bool:
        return self.session.login_mutation.is_pending

    @property
    def register_pending(self) -> bool:
        return self.session.register_mutation.is_pending

    async def submit_login(self) -> Optional[TokenResponse]:
        form = self.login_form.validate()
        if form is None:
            return None
        result = await self.session.login(form)
        if result is not None:
            self.redirect = home_path(result.user.role)
        return result

    async def submit_register(self) -> Optional[TokenResponse]:
        form = self.register_form.validate()
        if form is None:
            return None
        result = await self.session.register(form)
        if result is not None:
            self.redirect = home_path(result.user.role)
        return result
