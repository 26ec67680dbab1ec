import logging
import uuid
from typing import Any, Dict, Optional

import socketio
from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models, security
from seva_manager.core.capabilities import Capability, has_capability
from seva_manager.db.session import AsyncSessionLocal
from seva_manager.realtime import subscription_room

logger = logging.getLogger(__name__)

# {sid: profile_id}; only valid for a single server process
sid_profile_map = {}


async def _get_profile_id_from_token(token: str):
    """Validates the token and returns the id of an existing profile, or None."""
    subject = security.subject_from_token(token)
    if subject is None:
        return None
    async with AsyncSessionLocal() as db:
        profile = await crud.crud_profile.profile.get(db, id=subject)
    if profile is None:
        logger.warning(f"Profile not found for token subject {subject}")
        return None
    return profile.id


def _filter_id(filter_: Optional[Dict[str, Any]], column: str) -> Optional[uuid.UUID]:
    if not filter_ or column not in filter_:
        return None
    try:
        return uuid.UUID(str(filter_[column]))
    except ValueError:
        return None


async def _subscription_denial(
    db: AsyncSession, profile: models.Profile, table: str, filter_: Optional[Dict[str, Any]]
) -> Optional[str]:
    """
    Returns why ``profile`` may not follow the requested rows, or None when it may.
    Donor and payment rooms follow the same ownership rule as the donor endpoints.
    """
    if table in ("donors", "payment_history"):
        if has_capability(profile.role, Capability.VIEW_ALL_DONORS):
            return None
        if table == "donors":
            if _filter_id(filter_, "added_by") != profile.id:
                return "You can only follow donors you added"
            return None
        donor_id = _filter_id(filter_, "donor_id")
        donor = await crud.crud_donor.donor.get(db, id=donor_id) if donor_id else None
        if donor is None or donor.added_by != profile.id:
            return "You can only follow payments of donors you added"
        return None

    if table == "profiles" and not has_capability(profile.role, Capability.VIEW_REPORTS):
        if _filter_id(filter_, "referred_by") != profile.id:
            return "You can only follow your own referrals"
    return None


def register_socketio_handlers(sio: socketio.AsyncServer):
    @sio.event
    async def connect(sid, environ, auth):
        """Handles new client connections with authentication."""
        token = auth.get('token') if isinstance(auth, dict) else None
        if not token:
            logger.warning(f"Connection refused for {sid}: No token provided.")
            return False

        profile_id = await _get_profile_id_from_token(token)
        if not profile_id:
            logger.warning(f"Connection refused for {sid}: Token is invalid or profile not found.")
            return False

        sid_profile_map[sid] = profile_id
        logger.info(f"Authenticated {sid} for profile {profile_id}.")

    @sio.event
    async def disconnect(sid):
        profile_id = sid_profile_map.pop(sid, None)
        logger.info(f"Disconnected {sid} (profile {profile_id})")

    @sio.on('subscribe')
    async def handle_subscribe(sid, data):
        """Joins the change room for ``{"table": ..., "filter": {column: value}}``."""
        profile_id = sid_profile_map.get(sid)
        if profile_id is None:
            logger.warning(f"Received 'subscribe' from unknown sid: {sid}")
            return {"ok": False, "error": "Not authenticated"}
        try:
            table, filter_ = (data or {}).get('table'), (data or {}).get('filter')
            room = subscription_room(table, filter_)
        except (ValueError, AttributeError, TypeError) as e:
            logger.warning(f"Rejected subscription from {sid}: {e}")
            return {"ok": False, "error": str(e)}

        # Roles can change while connected, so they are read per request
        async with AsyncSessionLocal() as db:
            profile = await crud.crud_profile.profile.get(db, id=profile_id)
            denial = "Profile not found" if profile is None else await _subscription_denial(db, profile, table, filter_)
        if denial:
            logger.warning(f"Denied subscription to '{room}' for profile {profile_id}: {denial}")
            return {"ok": False, "error": denial}

        await sio.enter_room(sid, room)
        logger.debug(f"Sid {sid} joined room '{room}'")
        return {"ok": True, "room": room}

    @sio.on('unsubscribe')
    async def handle_unsubscribe(sid, data):
        try:
            room = subscription_room((data or {}).get('table'), (data or {}).get('filter'))
        except (ValueError, AttributeError, TypeError) as e:
            return {"ok": False, "error": str(e)}
        await sio.leave_room(sid, room)
        logger.debug(f"Sid {sid} left room '{room}'")
        return {"ok": True, "room": room}
