from fastapi import APIRouter, Depends
from pydantic import BaseModel

from lecture_pilot.api.deps import get_controller, http_error
from lecture_pilot.controller import AppController
from lecture_pilot.core.errors import InvalidTransitionError
from lecture_pilot.schemas import ChatMessage

router = APIRouter(prefix="/tutor", tags=["tutor"])


class TutorMessageRequest(BaseModel):
    text: str


class TutorMessagesResponse(BaseModel):
    ok: bool
    composing: bool
    reply: ChatMessage | None = None
    messages: list[ChatMessage]


def _messages(controller: AppController, reply: ChatMessage | None = None) -> TutorMessagesResponse:
    return TutorMessagesResponse(
        ok=True,
        composing=controller.composing,
        reply=reply,
        messages=list(controller.state.chat),
    )


@router.get("/messages", response_model=TutorMessagesResponse)
def list_messages(controller: AppController = Depends(get_controller)) -> TutorMessagesResponse:
    return _messages(controller)


@router.post("/messages", response_model=TutorMessagesResponse)
async def send_message(
    req: TutorMessageRequest,
    controller: AppController = Depends(get_controller),
) -> TutorMessagesResponse:
    # a failed turn still returns 200: the user message stays, no reply is added
    try:
        reply = await controller.send_chat(req.text)
    except InvalidTransitionError as e:
        raise http_error(e)
    return _messages(controller, reply)
