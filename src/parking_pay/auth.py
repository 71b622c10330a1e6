"""Server-side admin authentication with signed bearer tokens."""

import hmac
import logging

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .errors import AuthenticationError

logger = logging.getLogger(__name__)


class AdminAuthenticator:
    """
    Verifies the admin credential and issues time-limited tokens.

    Tokens are signed with the configured secret, so nothing about the
    session is kept in process memory.
    """

    def __init__(self, username: str, password: str, secret_key: str, max_age_seconds: int):
        self._username = username
        self._password = password
        self.max_age_seconds = max_age_seconds
        self._serializer = URLSafeTimedSerializer(secret_key, salt="parking-admin")

    def login(self, username: str, password: str) -> str:
        """
        Check credentials and return a signed token.

        Raises:
            AuthenticationError: If the credentials do not match
        """
        user_ok = hmac.compare_digest(username.encode(), self._username.encode())
        password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        if not (user_ok and password_ok):
            logger.warning(f"Rejected admin login for '{username}'")
            raise AuthenticationError("Invalid username or password")

        logger.info(f"Admin '{username}' logged in")
        return self._serializer.dumps({"sub": username, "role": "admin"})

    def verify(self, token: str) -> str:
        """
        Validate a token and return the admin username.

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        try:
            payload = self._serializer.loads(token, max_age=self.max_age_seconds)
        except SignatureExpired as exc:
            raise AuthenticationError("Session expired") from exc
        except BadSignature as exc:
            raise AuthenticationError("Invalid session token") from exc

        if payload.get("role") != "admin":
            raise AuthenticationError("Invalid session token")
        return payload["sub"]
