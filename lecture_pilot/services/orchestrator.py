from __future__ import annotations

import asyncio
import logging

from lecture_pilot.core.errors import GenerationError
from lecture_pilot.schemas import ExamType, StudyBundle, TimeFrame
from lecture_pilot.services.generators import GENERATORS, GenerationRequest, run_generator
from lecture_pilot.services.llm.client import LLMClient

logger = logging.getLogger(__name__)


async def generate_study_bundle(
    llm: LLMClient,
    transcript: str,
    exam_type: ExamType = ExamType.UNIVERSITY,
    time_frame: TimeFrame = TimeFrame.ONE_WEEK,
) -> StudyBundle:
    """
    Fan out all seven artifact requests at once and join on every one of them.

    Structured-list generators already fold their own failures into defaults,
    so anything raised here comes from a free-text generator and fails the
    whole bundle; results that did complete are dropped.
    """
    req = GenerationRequest(transcript=transcript, exam_type=exam_type, time_frame=time_frame)

    logger.info(
        "Generating study bundle (%d chars, %s, %s)",
        len(transcript or ""),
        exam_type.value,
        time_frame.value,
    )
    try:
        results = await asyncio.gather(*(run_generator(g, llm, req) for g in GENERATORS))
    except GenerationError as e:
        logger.error("Study bundle generation failed: %s", e)
        raise

    payload = {g.name: r for g, r in zip(GENERATORS, results)}
    return StudyBundle(**payload)
