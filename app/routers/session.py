# app/routers/session.py
"""Login / logout, usage terms, and session status (polled by the UI once a minute)."""

from fastapi import APIRouter, Depends
from app.database import RemoteStore, get_store
from app.dependencies import get_current_session, get_sessions
from app.schemas.session import LoginRequest, LoginResponse, SessionStatus
from app.services.access_gate import service_window
from app.services.auth_service import login
from app.services.session_service import Session, SessionStore

router = APIRouter()


@router.post("/session/login", response_model=LoginResponse, summary="Log in from a device")
async def login_endpoint(body: LoginRequest, store: RemoteStore = Depends(get_store),
                         sessions: SessionStore = Depends(get_sessions)):
    result = await login(store, body.username, body.password, body.device_id)
    session = sessions.create(result, body.device_id)
    return LoginResponse(
        token=session.token,
        username=session.username,
        is_admin=session.is_admin,
        unrestricted=session.unrestricted,
        terms_required=not session.terms_accepted,
    )


@router.get("/session", response_model=SessionStatus, summary="Current session + service window")
def session_status(session: Session = Depends(get_current_session)):
    return SessionStatus(
        username=session.username,
        is_admin=session.is_admin,
        unrestricted=session.unrestricted,
        terms_accepted=session.terms_accepted,
        service_open=service_window.refresh(),
        created_at=session.created_at,
    )


@router.post("/session/terms/accept", summary="Accept the usage terms")
def accept_terms(session: Session = Depends(get_current_session)):
    session.terms_accepted = True
    return {"status": "accepted"}


@router.post("/session/terms/decline", summary="Decline the usage terms (logs out)")
def decline_terms(session: Session = Depends(get_current_session),
                  sessions: SessionStore = Depends(get_sessions)):
    sessions.drop(session.token)
    return {"status": "logged_out"}


@router.post("/session/logout", summary="Log out")
def logout(session: Session = Depends(get_current_session),
           sessions: SessionStore = Depends(get_sessions)):
    sessions.drop(session.token)
    return {"status": "logged_out"}
