import logging
from typing import Optional, Protocol

import httpx
from fastapi import HTTPException

from .config import settings
from .core import MSG_FORBIDDEN, MSG_UNAUTHENTICATED
from .database import UserStore
from .models import Identity, User

logger = logging.getLogger(__name__)


class Unauthenticated(Exception):
    pass


class Authenticator(Protocol):
    async def verify(self, authorization: Optional[str]) -> Identity: ...


class WhoAmIAuthenticator:
    """Trades an Authorization header for an identity token by asking the
    external whoami service. Any non-200 answer means unauthenticated;
    transport errors propagate to the caller."""

    def __init__(self, url: str, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def verify(self, authorization: Optional[str]) -> Identity:
        if not authorization:
            raise Unauthenticated("missing Authorization header")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                resp = await client.get(self.url, headers={"Authorization": authorization})
            except httpx.RequestError as e:
                logger.error(f"whoami request error: {e}")
                raise

        if resp.status_code != 200:
            raise Unauthenticated(f"whoami answered {resp.status_code}")
        try:
            body = resp.json()
        except ValueError:
            body = None
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise Unauthenticated("whoami answer carries no token")
        return Identity(token=token)


async def require_admin(authenticator: Authenticator, users: UserStore,
                        authorization: Optional[str], action: str) -> User:
    try:
        identity = await authenticator.verify(authorization)
    except Unauthenticated as e:
        logger.warning("identity check rejected: %s", e)
        raise HTTPException(status_code=401, detail=MSG_UNAUTHENTICATED)

    user = users.get(identity.token)
    if user is None:
        logger.warning("identity token has no matching user")
        raise HTTPException(status_code=401, detail=MSG_UNAUTHENTICATED)
    if not user.is_admin():
        raise HTTPException(status_code=403, detail=MSG_FORBIDDEN.format(action=action))
    return user


AUTHENTICATOR = WhoAmIAuthenticator(settings.WHOAMI_URL, settings.WHOAMI_TIMEOUT)


def get_authenticator() -> Authenticator:
    return AUTHENTICATOR
