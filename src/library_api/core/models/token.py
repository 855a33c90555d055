"""Access token models."""

from typing import Any

from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Structured representation of verified access token claims."""

    raw_token: str = Field(default="", description="Original JWT token")

    issuer: str = Field(description="Issuer")
    subject: str = Field(description="Subject (user ID)")
    audience: str | list[str] = Field(description="Audience")
    expires_at: int = Field(description="Expiration time")
    issued_at: int = Field(description="Issued at")
    not_before: int | None = Field(default=None, description="Not before")
    jti: str | None = Field(default=None, description="JWT ID (unique token identifier)")

    roles: list[str] = Field(default_factory=list, description="User roles")

    custom_claims: dict[str, Any] = Field(
        default_factory=dict, description="Custom or additional claims"
    )

    @classmethod
    def from_jwt_payload(cls, payload: dict[str, Any], raw_token: str = "") -> "TokenClaims":
        """Create TokenClaims from a decoded JWT payload."""
        remaining = dict(payload)
        roles = remaining.pop("roles", [])
        return cls(
            raw_token=raw_token,
            issuer=remaining.pop("iss", ""),
            subject=str(remaining.pop("sub", "")),
            audience=remaining.pop("aud", []),
            expires_at=remaining.pop("exp"),
            issued_at=remaining.pop("iat"),
            not_before=remaining.pop("nbf", None),
            jti=remaining.pop("jti", None),
            roles=[roles] if isinstance(roles, str) else list(roles),
            custom_claims=remaining,
        )

    @property
    def user_id(self) -> int | None:
        try:
            return int(self.subject)
        except ValueError:
            return None
