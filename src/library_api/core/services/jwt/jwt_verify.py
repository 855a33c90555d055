"""JWT verification service."""

from authlib.jose import JoseError, JsonWebToken
from fastapi import HTTPException
from loguru import logger

from src.library_api.core.models.token import TokenClaims
from src.library_api.runtime.context import get_config


class JwtVerificationService:
    def verify_jwt(self, token: str, *, key: str | None = None) -> TokenClaims:
        """Verify signature and registered claims of an access token this API issued.

        Raises:
            HTTPException: 401 for any invalid token, 500 when no secret is configured
        """
        cfg = get_config()

        verification_key = key or cfg.app.session_signing_secret
        if not verification_key:
            raise HTTPException(status_code=500, detail="JWT signing secret not configured")

        claims_options = {
            "iss": {"essential": True, "values": [cfg.jwt.gen_issuer]},
            "aud": {"essential": True, "values": list(cfg.jwt.audiences)},
            "exp": {"essential": True},
            "sub": {"essential": True},
        }

        try:
            # Restrict accepted algorithms to the configured allowlist
            decoder = JsonWebToken(cfg.jwt.allowed_algorithms)
            claims = decoder.decode(token, verification_key, claims_options=claims_options)
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("Rejected access token: {}", exc)
            raise HTTPException(status_code=401, detail=f"JWT error: {exc}") from exc

        return TokenClaims.from_jwt_payload(dict(claims), raw_token=token)
