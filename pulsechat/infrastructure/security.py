# pulsechat/infrastructure/security.py
import logging
from typing import Optional

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from pulsechat.domain.entities import Caller

logger = logging.getLogger(__name__)


class SecurityService:
    """Verifies bearer tokens issued by the external identity provider."""

    def __init__(self, config):
        self.config = config

    def _decode(self, token: str) -> dict:
        options = {"require": ["sub", "exp"]}
        kwargs = {}
        if self.config.IDENTITY_JWT_AUDIENCE:
            kwargs["audience"] = self.config.IDENTITY_JWT_AUDIENCE
        else:
            options["verify_aud"] = False
        if self.config.IDENTITY_JWT_ISSUER:
            kwargs["issuer"] = self.config.IDENTITY_JWT_ISSUER
        return jwt.decode(
            token,
            self.config.IDENTITY_JWT_KEY,
            algorithms=[self.config.IDENTITY_JWT_ALGORITHM],
            options=options,
            **kwargs,
        )

    def decode_identity_token(self, token: str) -> Optional[Caller]:
        try:
            payload = self._decode(token)
        except (ExpiredSignatureError, InvalidTokenError) as e:
            logger.debug(f"Rejected identity token: {e!s}")
            return None

        subject = payload.get("sub")
        if not subject:
            return None
        issuer = payload.get("iss")
        return Caller(
            token_identifier=f"{issuer}|{subject}" if issuer else subject,
            name=payload.get("name"),
            email=payload.get("email"),
            picture_url=payload.get("picture") or payload.get("image_url"),
        )
