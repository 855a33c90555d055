import time
from dataclasses import dataclass
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from fastapi import HTTPException
from loguru import logger

from src.library_api.runtime.config.config_data import ConfigData
from src.library_api.runtime.context import get_config

_REGISTERED_CLAIMS = {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token together with the id it is revoked by."""

    token: str
    jti: str
    expires_in: int


class JwtGeneratorService:
    """Service for generating JWT access tokens for API authentication."""

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int = 3600,
        valid_after_seconds: int = 0,
        issuer: str | None = None,
        audience: str | list[str] | None = None,
        algorithm: str = "HS256",
        jti: str | None = None,
        secret: str | None = None,
    ) -> str:
        """Generate a signed JWT using authlib.

        Args:
            subject: Subject (sub) claim, the user id
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime in seconds
            valid_after_seconds: Time in seconds before the token is valid
            issuer: Issuer (iss) claim (defaults to config issuer)
            audience: Audience (aud) claim (defaults to config audiences)
            algorithm: Signing algorithm
            jti: JWT ID claim; generated when omitted
            secret: Signing secret; defaults to the configured one

        Raises:
            HTTPException: If the secret is missing or the algorithm is not allowed
        """
        config: ConfigData = get_config()

        issuer = issuer or config.jwt.gen_issuer
        secret = secret or config.app.session_signing_secret
        if not secret:
            raise HTTPException(status_code=500, detail="JWT signing secret not configured")

        if algorithm not in config.jwt.allowed_algorithms:
            logger.debug(
                f"Attempted to use disallowed algorithm: {algorithm}, only {config.jwt.allowed_algorithms} are allowed"
            )
            raise HTTPException(status_code=500, detail=f"Algorithm {algorithm} not allowed")

        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": issuer,
            "sub": subject,
            "aud": audience or config.jwt.audiences,
            "exp": now + expires_in_seconds,
            "iat": now,
            "nbf": now + valid_after_seconds,
            "jti": jti or generate_token(16),
        }

        if claims:
            payload.update({k: v for k, v in claims.items() if k not in _REGISTERED_CLAIMS})

        try:
            token = jwt.encode({"alg": algorithm, "typ": "JWT"}, payload, secret)
        except JoseError as e:
            raise HTTPException(status_code=500, detail=f"JWT encoding failed: {str(e)}") from e

        return token.decode() if isinstance(token, bytes) else token

    def generate_access_token(
        self,
        user_id: int,
        roles: list[str] | None = None,
        expires_in_seconds: int | None = None,
        **extra_claims: Any,
    ) -> IssuedToken:
        """Generate an access token for a user and return it with its jti.

        Example:
            issued = generate_access_token(user_id=7, roles=["USER"])
            repo.add_token(7, issued.jti, keep=5)
        """
        config = get_config()
        lifetime = expires_in_seconds or config.jwt.access_token_expire_minutes * 60
        jti = generate_token(16)

        claims: dict[str, Any] = dict(extra_claims)
        if roles:
            claims["roles"] = roles

        token = self.generate_jwt(
            subject=str(user_id),
            claims=claims,
            expires_in_seconds=lifetime,
            jti=jti,
        )
        return IssuedToken(token=token, jti=jti, expires_in=lifetime)
