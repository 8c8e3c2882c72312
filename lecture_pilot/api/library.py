from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from lecture_pilot.api.deps import get_controller, http_error
from lecture_pilot.controller import AppController
from lecture_pilot.core.errors import InvalidTransitionError
from lecture_pilot.db.session import get_db
from lecture_pilot.schemas import User
from lecture_pilot.services.library import get_lecture, lecture_summary, list_lectures, load_bundle

router = APIRouter(prefix="/library", tags=["library"])


def _user(controller: AppController) -> User:
    if controller.state.user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return controller.state.user


@router.post("")
def save_current_lecture(
    controller: AppController = Depends(get_controller),
    db: Session = Depends(get_db),
):
    _user(controller)
    try:
        row = controller.save_to_library(db)
    except InvalidTransitionError as e:
        raise http_error(e)
    return {"ok": True, "lecture": lecture_summary(row), "message": controller.state.success_message}


@router.get("")
def list_saved_lectures(
    controller: AppController = Depends(get_controller),
    db: Session = Depends(get_db),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
):
    user = _user(controller)
    total, rows = list_lectures(db, user.id, limit=limit, offset=offset)
    return {
        "ok": True,
        "total": total,
        "limit": limit,
        "offset": offset,
        "lectures": [lecture_summary(r) for r in rows],
    }


@router.get("/{lecture_id}")
def get_saved_lecture(
    lecture_id: int,
    controller: AppController = Depends(get_controller),
    db: Session = Depends(get_db),
):
    user = _user(controller)
    try:
        row = get_lecture(db, user.id, lecture_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    try:
        bundle = load_bundle(row)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "ok": True,
        "lecture": {**lecture_summary(row), "transcript": row.transcript_text},
        "bundle": bundle.model_dump(mode="json"),
    }
