from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from lecture_pilot.api.deps import get_controller, http_error, state_payload
from lecture_pilot.controller import AppController
from lecture_pilot.core.errors import LecturePilotError
from lecture_pilot.schemas import ExamType, TimeFrame
from lecture_pilot.services.transcripts import DEFAULT_TEXT_TITLE, DEMO_LECTURE

router = APIRouter(tags=["lectures"])


class LectureFromTextRequest(BaseModel):
    text: str
    title: str | None = None
    exam_type: ExamType = ExamType.UNIVERSITY
    time_frame: TimeFrame = TimeFrame.ONE_WEEK


class LectureFromYoutubeRequest(BaseModel):
    url: str
    exam_type: ExamType = ExamType.UNIVERSITY
    time_frame: TimeFrame = TimeFrame.ONE_WEEK


@router.get("/state")
def get_state(controller: AppController = Depends(get_controller)):
    return state_payload(controller)


@router.delete("/state/error")
def dismiss_error(controller: AppController = Depends(get_controller)):
    controller.clear_error()
    return state_payload(controller)


@router.get("/lectures/demo")
def demo_lecture():
    return {"ok": True, "title": DEFAULT_TEXT_TITLE, "text": DEMO_LECTURE}


@router.post("/lectures/from-text")
async def lecture_from_text(req: LectureFromTextRequest, controller: AppController = Depends(get_controller)):
    try:
        await controller.submit_text(req.text, req.title, req.exam_type, req.time_frame)
    except LecturePilotError as e:
        raise http_error(e)
    return state_payload(controller)


@router.post("/lectures/from-file")
async def lecture_from_file(
    file: UploadFile = File(...),
    exam_type: ExamType = Form(ExamType.UNIVERSITY),
    time_frame: TimeFrame = Form(TimeFrame.ONE_WEEK),
    controller: AppController = Depends(get_controller),
):
    data = await file.read()
    try:
        await controller.submit_file(file.filename or "", file.content_type, data, exam_type, time_frame)
    except LecturePilotError as e:
        raise http_error(e)
    return state_payload(controller)


@router.post("/lectures/from-youtube")
async def lecture_from_youtube(req: LectureFromYoutubeRequest, controller: AppController = Depends(get_controller)):
    try:
        await controller.submit_video(req.url, req.exam_type, req.time_frame)
    except LecturePilotError as e:
        raise http_error(e)
    return state_payload(controller)


@router.post("/lectures/reset")
def reset_lecture(controller: AppController = Depends(get_controller)):
    try:
        controller.reset()
    except LecturePilotError as e:
        raise http_error(e)
    return state_payload(controller)
