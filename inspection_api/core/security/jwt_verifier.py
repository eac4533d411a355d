from __future__ import annotations

from typing import Any

import jwt


class AuthTokenValidationError(Exception):
    """Raised when a bearer token is malformed, expired or badly signed."""


class JWTVerifier:
    """Verifies shared-secret (HS*) access tokens issued by the shop login."""

    def __init__(
        self,
        *,
        secret: str,
        algorithms: list[str],
        leeway_sec: int = 0,
    ) -> None:
        self.secret = secret
        self.algorithms = algorithms
        self.leeway_sec = leeway_sec

    def verify(self, token: str) -> dict[str, Any]:
        if not self.secret:
            raise AuthTokenValidationError("JWT secret is not configured.")
        try:
            claims = jwt.decode(
                token,
                key=self.secret,
                algorithms=self.algorithms,
                leeway=self.leeway_sec,
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthTokenValidationError("Token has expired.") from exc
        except jwt.PyJWTError as exc:
            raise AuthTokenValidationError(f"Invalid token: {exc}") from exc
        if not isinstance(claims, dict):
            raise AuthTokenValidationError("Token payload must be an object.")
        return claims
