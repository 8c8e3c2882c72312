from fastapi import HTTPException, Request

from lecture_pilot.controller import AppController
from lecture_pilot.core.errors import (
    AuthError,
    GenerationError,
    InvalidInputError,
    InvalidTransitionError,
    LecturePilotError,
)


def get_controller(request: Request) -> AppController:
    return request.app.state.controller


def http_error(e: LecturePilotError) -> HTTPException:
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, AuthError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, InvalidTransitionError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, GenerationError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def state_payload(controller: AppController) -> dict:
    return {
        "ok": True,
        "state": controller.state.model_dump(mode="json"),
        "composing": controller.composing,
    }
