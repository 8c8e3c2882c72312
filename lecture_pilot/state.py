"""
Application state and the only functions allowed to change it.

Every transition takes the current AppState and returns a new one; nothing
mutates a state in place. Views move Auth -> Upload -> Processing -> Dashboard,
with sign-out reachable from anywhere and errors attached to Upload.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from lecture_pilot.core.errors import InvalidTransitionError
from lecture_pilot.schemas import (
    ChatMessage,
    EmailResult,
    ExamType,
    Lecture,
    StudyBundle,
    TimeFrame,
    User,
    ViewState,
)

PROCESSING_ERROR = "An error occurred while communicating with the AI. Please try again."


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    view: ViewState = ViewState.AUTH
    user: User | None = None

    # sign-up waits on the welcome email before entering the app
    pending_user: User | None = None
    welcome_email: EmailResult | None = None

    lecture: Lecture | None = None
    exam_type: ExamType = ExamType.UNIVERSITY
    time_frame: TimeFrame = TimeFrame.ONE_WEEK
    bundle: StudyBundle | None = None
    chat: tuple[ChatMessage, ...] = ()

    error: str | None = None
    success_message: str | None = None

    # bumped on every submission, reset and sign-out; a fan-out result is
    # applied only if its token still matches
    generation: int = 0


def _require(state: AppState, action: str, *views: ViewState) -> None:
    if state.view not in views:
        raise InvalidTransitionError(action, state.view.value)


def is_current_generation(state: AppState, generation: int) -> bool:
    return state.generation == generation and state.view is ViewState.PROCESSING


# ----------------------------
# Auth
# ----------------------------

def signed_in(state: AppState, user: User) -> AppState:
    if state.user is not None and state.user.id != user.id:
        # a different account: nothing of the previous one carries over
        state = signed_out(state)
    return state.model_copy(
        update={
            "user": user,
            "pending_user": None,
            "welcome_email": None,
            "view": ViewState.UPLOAD if state.view is ViewState.AUTH else state.view,
            "error": None,
        }
    )


def sign_up_pending(state: AppState, user: User, welcome_email: EmailResult) -> AppState:
    _require(state, "sign up", ViewState.AUTH)
    return state.model_copy(update={"pending_user": user, "welcome_email": welcome_email, "error": None})


def continue_after_sign_up(state: AppState) -> AppState:
    _require(state, "continue", ViewState.AUTH)
    if state.pending_user is None:
        raise InvalidTransitionError("continue without a pending sign-up", state.view.value)
    return signed_in(state, state.pending_user)


def signed_out(state: AppState) -> AppState:
    return AppState(generation=state.generation + 1)


def session_changed(state: AppState, user: User | None) -> AppState:
    """Push notification from the identity backend."""
    if user is None:
        return state if state.user is None and state.pending_user is None else signed_out(state)
    if state.pending_user is not None:
        # the welcome screen is still up; entering the app waits for "continue"
        return state
    return signed_in(state, user)


# ----------------------------
# Processing
# ----------------------------

def input_rejected(state: AppState, message: str) -> AppState:
    _require(state, "submit a lecture", ViewState.UPLOAD)
    return state.model_copy(update={"error": message})


def start_processing(
    state: AppState,
    lecture: Lecture,
    exam_type: ExamType,
    time_frame: TimeFrame,
) -> AppState:
    _require(state, "submit a lecture", ViewState.UPLOAD)
    return state.model_copy(
        update={
            "view": ViewState.PROCESSING,
            "lecture": lecture,
            "exam_type": exam_type,
            "time_frame": time_frame,
            "bundle": None,
            "chat": (),
            "error": None,
            "success_message": None,
            "generation": state.generation + 1,
        }
    )


def processing_succeeded(
    state: AppState,
    generation: int,
    bundle: StudyBundle,
    chat: tuple[ChatMessage, ...],
) -> AppState:
    if not is_current_generation(state, generation):
        return state
    return state.model_copy(update={"view": ViewState.DASHBOARD, "bundle": bundle, "chat": chat})


def processing_failed(state: AppState, generation: int, message: str = PROCESSING_ERROR) -> AppState:
    if not is_current_generation(state, generation):
        return state
    return state.model_copy(
        update={"view": ViewState.UPLOAD, "lecture": None, "bundle": None, "error": message}
    )


def reset(state: AppState) -> AppState:
    _require(state, "reset", ViewState.DASHBOARD, ViewState.PROCESSING, ViewState.UPLOAD)
    return state.model_copy(
        update={
            "view": ViewState.UPLOAD,
            "lecture": None,
            "bundle": None,
            "chat": (),
            "error": None,
            "success_message": None,
            "generation": state.generation + 1,
        }
    )


def clear_error(state: AppState) -> AppState:
    return state.model_copy(update={"error": None, "success_message": None})


# ----------------------------
# Dashboard
# ----------------------------

def chat_updated(state: AppState, chat: tuple[ChatMessage, ...]) -> AppState:
    _require(state, "chat", ViewState.DASHBOARD)
    return state.model_copy(update={"chat": tuple(chat)})


def lecture_saved(state: AppState, message: str) -> AppState:
    _require(state, "save", ViewState.DASHBOARD)
    return state.model_copy(update={"success_message": message})
