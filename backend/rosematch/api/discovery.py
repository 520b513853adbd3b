"""Discovery session, decision and preference endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from rosematch.domain.discovery import service
from rosematch.domain.discovery.schemas import (
	DecisionPayload,
	DecisionResponse,
	PreferencesPayload,
	PreferencesResponse,
	ProfileCard,
	ProfileUpdate,
	SessionView,
	UndoResponse,
)
from rosematch.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/discovery", tags=["discovery"])


@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def open_discovery_session(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> SessionView:
	return await service.open_session(auth_user.id)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_discovery_session(
	session_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> SessionView:
	return await service.get_session(auth_user.id, session_id)


@router.post("/sessions/{session_id}/decide", response_model=DecisionResponse)
async def decide_current_card(
	session_id: str,
	payload: DecisionPayload,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> DecisionResponse:
	return await service.decide(auth_user.id, session_id, payload.decision)


@router.post("/sessions/{session_id}/undo", response_model=UndoResponse)
async def undo_last_decision(
	session_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> UndoResponse:
	return await service.undo(auth_user.id, session_id)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_discovery_session(
	session_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Response:
	await service.close_session(auth_user.id, session_id)
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/preferences", response_model=PreferencesResponse)
async def get_my_preferences(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> PreferencesResponse:
	return await service.get_preferences(auth_user.id)


@router.put("/preferences", response_model=PreferencesResponse)
async def update_my_preferences(
	payload: PreferencesPayload,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> PreferencesResponse:
	return await service.update_preferences(auth_user.id, payload)


@router.get("/profile", response_model=ProfileCard)
async def get_my_discovery_profile(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ProfileCard:
	return await service.get_profile(auth_user.id)


@router.put("/profile", response_model=ProfileCard)
async def update_my_discovery_profile(
	update: ProfileUpdate,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> ProfileCard:
	return await service.upsert_profile(auth_user.id, update)
