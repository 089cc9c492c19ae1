from typing import Optional

from fastapi import APIRouter, Depends, Header

from cafeapp.core.context import SessionRegistry, StaffSession
from cafeapp.core.schemas import LoginIn
from cafeapp.deps import current_session, get_sessions

router = APIRouter(prefix="/session", tags=["session"])


def _serialize(s: StaffSession) -> dict:
    return {
        "token": s.token,
        "user_id": s.user_id,
        "display_name": s.display_name,
        "role": s.role,
        "started_at": s.started_at.isoformat(),
        "favorites": sorted(s.favorites),
        "cart_lines": len(s.cart),
    }


@router.post("/login")
def login(payload: LoginIn, sessions: SessionRegistry = Depends(get_sessions)):
    s = sessions.open(payload.user_id, payload.display_name, payload.role)
    return _serialize(s)


@router.post("/logout")
def logout(
    x_session_token: Optional[str] = Header(default=None),
    sessions: SessionRegistry = Depends(get_sessions),
):
    return {"closed": sessions.close(x_session_token)}


@router.get("/me")
def me(session: StaffSession = Depends(current_session)):
    return _serialize(session)


@router.post("/favorites/{name}")
def toggle_favorite(name: str, session: StaffSession = Depends(current_session)):
    on = session.toggle_favorite(name)
    return {"name": name, "favorite": on, "favorites": sorted(session.favorites)}
