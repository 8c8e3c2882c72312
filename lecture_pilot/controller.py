from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from lecture_pilot import state as transitions
from lecture_pilot.core.errors import (
    AuthError,
    GenerationError,
    InvalidInputError,
    InvalidTransitionError,
)
from lecture_pilot.schemas import ChatMessage, EmailResult, ExamType, TimeFrame, User, ViewState
from lecture_pilot.services import library
from lecture_pilot.services.auth import AuthBackend, DEMO_USER_NAME, Subscription
from lecture_pilot.services.email import send_welcome_email
from lecture_pilot.services.llm.client import LLMClient
from lecture_pilot.services.orchestrator import generate_study_bundle
from lecture_pilot.services.transcripts import (
    FileTranscriber,
    PlainTextTranscriber,
    ResolvedTranscript,
    resolve_file,
    resolve_text,
    resolve_video,
)
from lecture_pilot.services.tutor import TutorSession
from lecture_pilot.services.widgets import FlashcardDeck, QuizRunner
from lecture_pilot.state import AppState

logger = logging.getLogger(__name__)


class AppController:
    """
    Owns the one AppState of this client instance. Every change goes through a
    function in `lecture_pilot.state`; the dashboard widgets and the tutor
    session are rebuilt whenever a new bundle lands.
    """

    def __init__(
        self,
        llm: LLMClient,
        auth: AuthBackend,
        transcriber: FileTranscriber | None = None,
    ) -> None:
        self.llm = llm
        self.auth = auth
        self.transcriber = transcriber or PlainTextTranscriber()
        self.state = AppState()

        self.tutor: TutorSession | None = None
        self.flashcards: FlashcardDeck | None = None
        self.quiz: QuizRunner | None = None

        self._subscription: Subscription | None = None

    # ----------------------------
    # Lifecycle
    # ----------------------------

    async def startup(self) -> None:
        self._subscription = self.auth.on_auth_state_change(self._on_auth_event)
        user = await self.auth.get_session()
        if user is not None:
            logger.info("Restored session for %s", user.email)
            self.state = transitions.signed_in(self.state, user)

    def shutdown(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_auth_event(self, event: str, user: User | None) -> None:
        logger.info("Auth state changed: %s", event)
        before = self.state
        self.state = transitions.session_changed(self.state, user)
        if before.user is not None and (self.state.user is None or self.state.user.id != before.user.id):
            self._drop_dashboard()

    # ----------------------------
    # Auth
    # ----------------------------

    async def sign_up(self, email: str, password: str, name: str | None) -> EmailResult:
        if self.state.view is not ViewState.AUTH:
            raise InvalidTransitionError("sign up", self.state.view.value)

        user = await self.auth.sign_up(email, password, name)
        if user is None:
            raise AuthError("User created, but unexpected response. Please try signing in.")

        display_name = name or (DEMO_USER_NAME if self.auth.demo else "Student")
        user = user.model_copy(update={"email": user.email or email, "name": display_name})

        result = await send_welcome_email(user.email, display_name)
        self.state = transitions.sign_up_pending(self.state, user, result)
        return result

    async def sign_in(self, email: str, password: str) -> User:
        if self.state.view is not ViewState.AUTH:
            raise InvalidTransitionError("sign in", self.state.view.value)
        user = await self.auth.sign_in(email, password)
        self.state = transitions.signed_in(self.state, user)
        return user

    def continue_after_sign_up(self) -> None:
        self.state = transitions.continue_after_sign_up(self.state)

    async def sign_out(self) -> None:
        await self.auth.sign_out()
        self.state = transitions.signed_out(self.state)
        self._drop_dashboard()

    # ----------------------------
    # Lecture submission
    # ----------------------------

    def _reject(self, message: str) -> None:
        self.state = transitions.input_rejected(self.state, message)

    def _require_upload(self) -> None:
        if self.state.view is not ViewState.UPLOAD:
            raise InvalidTransitionError("submit a lecture", self.state.view.value)

    async def submit_text(
        self,
        text: str,
        title: str | None,
        exam_type: ExamType,
        time_frame: TimeFrame,
    ) -> AppState:
        self._require_upload()
        try:
            resolved = resolve_text(text, title)
        except InvalidInputError as e:
            self._reject(str(e))
            raise
        return await self.process(resolved, exam_type, time_frame)

    async def submit_file(
        self,
        filename: str,
        content_type: str | None,
        data: bytes,
        exam_type: ExamType,
        time_frame: TimeFrame,
    ) -> AppState:
        self._require_upload()
        try:
            resolved = resolve_file(self.transcriber, filename, content_type, data)
        except InvalidInputError as e:
            self._reject(str(e))
            raise
        return await self.process(resolved, exam_type, time_frame)

    async def submit_video(self, url: str, exam_type: ExamType, time_frame: TimeFrame) -> AppState:
        self._require_upload()
        token, user = self.state.generation, self.state.user
        try:
            resolved = await resolve_video(self.llm, url)
        except (InvalidInputError, GenerationError) as e:
            # the user stays on the source-selection screen
            if self._submission_is_current(token, user):
                self._reject(str(e))
            raise

        # the web-search lookup is slow; reset or sign-out may have happened meanwhile
        if not self._submission_is_current(token, user):
            logger.warning(
                "Discarding video transcript from stale submission %d (current %d, view %s)",
                token,
                self.state.generation,
                self.state.view.value,
            )
            return self.state
        return await self.process(resolved, exam_type, time_frame)

    def _submission_is_current(self, token: int, user: User | None) -> bool:
        s = self.state
        return (
            s.generation == token
            and s.view is ViewState.UPLOAD
            and (s.user.id if s.user else None) == (user.id if user else None)
        )

    async def process(
        self,
        resolved: ResolvedTranscript,
        exam_type: ExamType,
        time_frame: TimeFrame,
    ) -> AppState:
        self.state = transitions.start_processing(self.state, resolved.to_lecture(), exam_type, time_frame)
        token = self.state.generation
        lecture = self.state.lecture

        try:
            bundle = await generate_study_bundle(self.llm, lecture.transcript, exam_type, time_frame)
        except GenerationError:
            if not transitions.is_current_generation(self.state, token):
                logger.warning("Discarding failure of stale generation %d", token)
            self.state = transitions.processing_failed(self.state, token)
            raise

        if not transitions.is_current_generation(self.state, token):
            logger.warning(
                "Discarding stale generation %d (current %d, view %s)",
                token,
                self.state.generation,
                self.state.view.value,
            )
            return self.state

        tutor = TutorSession(self.llm, lecture.transcript, on_change=self._on_chat)
        self.state = transitions.processing_succeeded(self.state, token, bundle, tutor.messages)
        self.tutor = tutor
        self.flashcards = FlashcardDeck(bundle.flashcards)
        self.quiz = QuizRunner(bundle.quiz)
        return self.state

    def reset(self) -> None:
        self.state = transitions.reset(self.state)
        self._drop_dashboard()

    def clear_error(self) -> None:
        self.state = transitions.clear_error(self.state)

    def _drop_dashboard(self) -> None:
        self.tutor = None
        self.flashcards = None
        self.quiz = None

    # ----------------------------
    # Dashboard
    # ----------------------------

    def _require_dashboard(self, action: str) -> None:
        if self.state.view is not ViewState.DASHBOARD:
            raise InvalidTransitionError(action, self.state.view.value)

    def _on_chat(self, tutor: TutorSession) -> None:
        # a reply that lands after reset/sign-out belongs to a dead session
        if tutor is not self.tutor or self.state.view is not ViewState.DASHBOARD:
            logger.warning("Dropping chat update from a stale tutor session")
            return
        self.state = transitions.chat_updated(self.state, tutor.messages)

    @property
    def composing(self) -> bool:
        return bool(self.tutor and self.tutor.composing)

    async def send_chat(self, text: str) -> ChatMessage | None:
        self._require_dashboard("chat")
        return await self.tutor.send(text)

    def flashcard_deck(self) -> FlashcardDeck:
        self._require_dashboard("use flashcards")
        return self.flashcards

    def quiz_runner(self) -> QuizRunner:
        self._require_dashboard("take the quiz")
        return self.quiz

    def save_to_library(self, db: Session):
        self._require_dashboard("save")
        s = self.state
        row = library.save_lecture(db, s.user.id, s.lecture, s.bundle, s.exam_type, s.time_frame)
        self.state = transitions.lecture_saved(self.state, f'Saved "{row.title}" to your library')
        return row
