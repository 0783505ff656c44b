"""
Bearer token lifecycle for the gallery web service.

A session is renewed lazily: every protected call first asks the
TokenManager to make sure the current token will outlive the call. There is
no background refresh, and renewals from concurrent callers simply
overwrite each other; the exchange is idempotent.
"""

import time
from dataclasses import dataclass
from typing import Optional

import requests
from pydantic import ValidationError

from ..config.logger_module import log_debug, log_info, log_error
from .publisher_errors import AuthenticationError, DecodeError, TransportError
from .publisher_models import AuthenticationTokenResponse


# Tokens closer than this to expiry are renewed before use
TOKEN_RENEWAL_MARGIN_SECONDS = 4 * 60


@dataclass(frozen=True)
class Credentials:
    """Username/password pair used for the token exchange."""
    username: Optional[str]
    password: Optional[str]

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass
class Session:
    """Current access token and its absolute expiry (epoch seconds)."""
    access_token: Optional[str] = None
    expires_at: Optional[float] = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def needs_refresh(self,
                      now: float,
                      margin_seconds: float = TOKEN_RENEWAL_MARGIN_SECONDS) -> bool:
        """True when there is no token or it expires within the margin."""
        if self.expires_at is None:
            return True
        return self.expires_at < now + margin_seconds

    def __repr__(self) -> str:
        token = "***" if self.access_token else None
        return f"Session(access_token={token!r}, expires_at={self.expires_at!r})"


class TokenManager:
    """
    Owns the Session of one publisher instance.

    On a successful exchange the bearer token is installed as a default
    header on the shared requests session, so every later request made
    through it is authorized.
    """

    def __init__(self,
                 credentials: Credentials,
                 token_url: str,
                 http_session: requests.Session,
                 request_timeout: Optional[float] = None):
        """
        Args:
            credentials: Username/password for the token endpoint
            token_url: Absolute URL of the token endpoint
            http_session: Session shared with the publisher
            request_timeout: Optional timeout forwarded to requests
        """
        self.credentials = credentials
        self.token_url = token_url
        self.request_timeout = request_timeout
        self.session = Session()
        self._http = http_session

    def ensure_valid_session(self) -> Session:
        """
        Renew the session if it is missing or about to expire.

        Returns:
            The session to use for the next protected call

        Raises:
            AuthenticationError: If the credentials are rejected
            DecodeError: If the token response cannot be read
            TransportError: If the token endpoint cannot be reached
        """
        if self.session.needs_refresh(time.time()):
            log_debug("Access token missing or about to expire, renewing")
            self.authenticate()
        return self.session

    def authenticate(self) -> Session:
        """
        Exchange the stored credentials for a new access token.

        Raises:
            AuthenticationError: On a non-success response
            DecodeError: If the response body is not a token response
            TransportError: If the request itself fails
        """
        log_info(f"Requesting access token from {self.token_url}")

        try:
            response = self._http.request(
                "POST",
                self.token_url,
                data={
                    "username": self.credentials.username,
                    "password": self.credentials.password,
                },
                timeout=self.request_timeout
            )
        except requests.exceptions.RequestException as e:
            log_error(f"Token request failed: {e}")
            raise TransportError(f"Token request failed: {str(e)}")

        if not 200 <= response.status_code < 300:
            log_error(f"HTTP {response.status_code} from token endpoint")
            raise AuthenticationError("Authentication error")

        try:
            token = AuthenticationTokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            log_error(f"Unreadable token response: {e}")
            raise DecodeError("Response content error")

        self.session = Session(
            access_token=token.access_token,
            expires_at=time.time() + token.expires_in
        )
        self._http.headers["Authorization"] = f"Bearer {token.access_token}"

        log_info(f"Authenticated, token valid for {token.expires_in}s")

        return self.session
