"""
Supabase auth and profile client.

Handles password sign-up/sign-in, the current session, auth state
listeners, and the per-user ``profiles.api_keys`` record holding exchange
credentials.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from src.coinboard.config import SupabaseSettings, settings
from src.coinboard.exchanges.transport import RestTransport
from src.coinboard.logging import get_logger
from src.coinboard.shared.errors import AuthenticationRequiredError, RemoteAPIError
from src.coinboard.shared.models import Credential, Exchange, ExchangeCredentials

logger = get_logger(__name__)


class AuthEvent(str, Enum):
    """Auth state change events."""
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class User(BaseModel):
    """Authenticated user."""
    id: str
    email: Optional[str] = None


class Session(BaseModel):
    """Auth session issued by the backend."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: int = 3600
    user: User


AuthListener = Callable[[AuthEvent, Optional[Session]], None]


class SupabaseAuthClient:
    """Session-based auth against ``/auth/v1``."""

    def __init__(
        self,
        config: Optional[SupabaseSettings] = None,
        transport: Optional[RestTransport] = None,
    ):
        self.config = config or settings.supabase
        self.transport = transport or RestTransport(self.config.url, exchange="supabase")
        self._session: Optional[Session] = None
        self._listeners: List[AuthListener] = []

    async def close(self) -> None:
        await self.transport.close()

    def headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.config.anon_key:
            headers["apikey"] = self.config.anon_key
        token = access_token or self.config.anon_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _set_session(self, session: Optional[Session], event: AuthEvent) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception as e:
                logger.error(f"Auth listener failed on {event.value}: {e}")

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_session(self) -> Optional[Session]:
        return self._session

    def require_session(self) -> Session:
        if self._session is None:
            raise AuthenticationRequiredError()
        return self._session

    async def sign_up(self, email: str, password: str) -> Optional[Session]:
        """Create an account. Returns a session unless email confirmation is pending."""
        data = await self.transport.request_json(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password},
            headers=self.headers(),
        )
        if isinstance(data, dict) and data.get("access_token"):
            session = Session.model_validate(data)
            self._set_session(session, AuthEvent.SIGNED_IN)
            logger.info(f"Signed up and signed in user {session.user.id}")
            return session

        logger.info("Signed up, waiting for email confirmation")
        return None

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        try:
            data = await self.transport.request_json(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self.headers(),
            )
        except RemoteAPIError as e:
            if e.status_code in (400, 401):
                raise AuthenticationRequiredError(f"Sign-in failed: {e.remote_message}") from e
            raise

        session = Session.model_validate(data)
        self._set_session(session, AuthEvent.SIGNED_IN)
        logger.info(f"Signed in user {session.user.id}")
        return session

    async def sign_out(self) -> None:
        session = self._session
        if session is None:
            return
        try:
            await self.transport.request(
                "POST", "/auth/v1/logout", headers=self.headers(session.access_token)
            )
        finally:
            self._set_session(None, AuthEvent.SIGNED_OUT)
            logger.info(f"Signed out user {session.user.id}")

    async def get_user(self) -> User:
        """Current user, verified with the backend."""
        session = self.require_session()
        try:
            data = await self.transport.request_json(
                "GET", "/auth/v1/user", headers=self.headers(session.access_token)
            )
        except RemoteAPIError as e:
            if e.status_code in (401, 403):
                raise AuthenticationRequiredError("Session expired") from e
            raise
        return User.model_validate(data)


class ProfileStore:
    """Reads and writes the ``api_keys`` object of the signed-in user's profile."""

    def __init__(self, auth: SupabaseAuthClient):
        self.auth = auth
        self.table = auth.config.profiles_table

    def _path(self) -> str:
        return f"/rest/v1/{self.table}"

    async def _load(self, user: User, session: Session) -> ExchangeCredentials:
        rows = await self.auth.transport.request_json(
            "GET",
            self._path(),
            params={"id": f"eq.{user.id}", "select": "api_keys"},
            headers=self.auth.headers(session.access_token),
        )
        if not rows or not rows[0].get("api_keys"):
            return ExchangeCredentials()
        return ExchangeCredentials.model_validate(rows[0]["api_keys"])

    async def get_api_keys(self) -> ExchangeCredentials:
        """Credentials of the current user; empty when none are stored."""
        user = await self.auth.get_user()
        return await self._load(user, self.auth.require_session())

    async def save_api_keys(self, exchange: Exchange, credential: Credential) -> ExchangeCredentials:
        """Store ``credential`` for ``exchange``, keeping the other exchange's keys."""
        user = await self.auth.get_user()
        session = self.auth.require_session()

        merged = (await self._load(user, session)).to_profile()
        merged[exchange.value] = credential.to_profile()

        headers = self.auth.headers(session.access_token)
        headers["Prefer"] = "return=minimal"
        # return=minimal answers 204 with no body, so the raw response is checked
        response = await self.auth.transport.request(
            "PATCH",
            self._path(),
            params={"id": f"eq.{user.id}"},
            json={"api_keys": merged},
            headers=headers,
        )
        if response.is_error:
            raise RemoteAPIError(
                response.status_code, RestTransport.error_message(response), "supabase"
            )

        logger.info(f"Saved {exchange.value} API keys for user {user.id}")
        return ExchangeCredentials.model_validate(merged)
