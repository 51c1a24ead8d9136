"""
Storefront session resolution shared by the account and cart routers.

Sessions are identified by the X-Session-ID header. A missing header starts
a new session; an unknown (expired) id starts a fresh session under the same
id. The resolved id is echoed back in the response header.
"""

import logging
import uuid
from typing import Optional

from fastapi import Header, HTTPException, Response

from ...database.session_storage import get_session_storage, validate_session_id
from ...middleware import SESSION_HEADER
from ...models.session import StorefrontSession
from ...utils.logging_context import bind_session_context

logger = logging.getLogger(__name__)


async def get_storefront_session(
    response: Response,
    x_session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
) -> StorefrontSession:
    """FastAPI dependency returning the caller's storefront session."""
    storage = get_session_storage()

    if x_session_id:
        try:
            validate_session_id(x_session_id)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        session = await storage.get_session(x_session_id)
        if session is None:
            logger.info(f"Session {x_session_id} not found, starting a new one")
            session = StorefrontSession(session_id=x_session_id)
    else:
        session = StorefrontSession(session_id=str(uuid.uuid4()))
        logger.info(f"Started new storefront session {session.session_id}")

    response.headers[SESSION_HEADER] = session.session_id
    bind_session_context(
        session_id=session.session_id,
        user_id=session.user.user.id if session.user.user else None,
    )
    return session


async def save_storefront_session(session: StorefrontSession):
    await get_session_storage().save_session(session)
