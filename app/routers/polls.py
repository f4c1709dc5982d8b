"""Poll, vote and results endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Response

from app.config import settings
from app.dependencies import FINGERPRINT_COOKIE, get_db_client, get_voter_fingerprint
from app.schemas.poll import MovieDetailsUpdate, PollCreate, VoteSubmit
from app.services.poll_service import PollService
from supabase import Client

router = APIRouter()

FINGERPRINT_MAX_AGE_SECONDS = 60 * 60 * 24 * 365


@router.post("")
def create_poll(payload: PollCreate, client: Client = Depends(get_db_client)) -> dict:
    """Create a new poll."""
    service = PollService(client)
    return service.create(
        title=payload.title,
        voting_method=payload.voting_method,
        movies=payload.movies,
    )


@router.get("/{poll_id}")
def get_poll(
    poll_id: str,
    fingerprint: str | None = Depends(get_voter_fingerprint),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return a poll and whether the caller already voted."""
    service = PollService(client)
    return service.detail(poll_id, fingerprint)


@router.post("/{poll_id}/votes")
def cast_vote(
    poll_id: str,
    payload: VoteSubmit,
    response: Response,
    fingerprint: str | None = Depends(get_voter_fingerprint),
    client: Client = Depends(get_db_client),
) -> dict:
    """Cast or replace the caller's vote."""
    service = PollService(client)
    voter = fingerprint or str(uuid.uuid4())
    vote = service.vote(poll_id, voter, payload.vote_data)
    if fingerprint is None:
        response.set_cookie(
            FINGERPRINT_COOKIE,
            voter,
            max_age=FINGERPRINT_MAX_AGE_SECONDS,
            path="/",
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
        )
    return {"vote": vote}


@router.get("/{poll_id}/results")
def get_results(
    poll_id: str,
    fingerprint: str | None = Depends(get_voter_fingerprint),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return tallied results for a poll."""
    service = PollService(client)
    return service.results(poll_id, fingerprint)


@router.patch("/{poll_id}/movies")
def update_movie_details(
    poll_id: str,
    payload: MovieDetailsUpdate,
    client: Client = Depends(get_db_client),
) -> dict:
    """Store a fetched plot or poster on one of the poll's movies."""
    service = PollService(client)
    return service.update_movie_details(
        poll_id,
        imdb_id=payload.imdb_id,
        plot=payload.plot,
        poster=payload.poster,
    )
