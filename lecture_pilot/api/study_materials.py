from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from lecture_pilot.api.deps import get_controller, http_error
from lecture_pilot.controller import AppController
from lecture_pilot.core.errors import LecturePilotError

router = APIRouter(tags=["study_materials"])


# -----------------------
# Flashcards
# -----------------------

def _deck(controller: AppController):
    try:
        return controller.flashcard_deck()
    except LecturePilotError as e:
        raise http_error(e)


@router.get("/flashcards")
def flashcards_state(controller: AppController = Depends(get_controller)):
    return {"ok": True, **_deck(controller).snapshot()}


@router.post("/flashcards/flip")
def flashcards_flip(controller: AppController = Depends(get_controller)):
    deck = _deck(controller)
    deck.flip()
    return {"ok": True, **deck.snapshot()}


@router.post("/flashcards/next")
def flashcards_next(controller: AppController = Depends(get_controller)):
    deck = _deck(controller)
    deck.next()
    return {"ok": True, **deck.snapshot()}


@router.post("/flashcards/previous")
def flashcards_previous(controller: AppController = Depends(get_controller)):
    deck = _deck(controller)
    deck.previous()
    return {"ok": True, **deck.snapshot()}


# -----------------------
# Quiz
# -----------------------

class QuizAnswerRequest(BaseModel):
    question_id: int
    option_index: int


def _quiz(controller: AppController):
    try:
        return controller.quiz_runner()
    except LecturePilotError as e:
        raise http_error(e)


@router.get("/quiz")
def quiz_state(controller: AppController = Depends(get_controller)):
    return {"ok": True, **_quiz(controller).snapshot()}


@router.post("/quiz/answers")
def quiz_answer(req: QuizAnswerRequest, controller: AppController = Depends(get_controller)):
    quiz = _quiz(controller)
    try:
        quiz.select(req.question_id, req.option_index)
    except LecturePilotError as e:
        raise http_error(e)
    return {"ok": True, **quiz.snapshot()}


@router.post("/quiz/submit")
def quiz_submit(controller: AppController = Depends(get_controller)):
    quiz = _quiz(controller)
    try:
        quiz.submit()
    except LecturePilotError as e:
        raise http_error(e)
    return {"ok": True, **quiz.snapshot()}


@router.post("/quiz/retake")
def quiz_retake(controller: AppController = Depends(get_controller)):
    quiz = _quiz(controller)
    quiz.retake()
    return {"ok": True, **quiz.snapshot()}
