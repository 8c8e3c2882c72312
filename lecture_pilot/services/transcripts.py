from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from lecture_pilot.core.errors import GenerationError, InvalidInputError, TranscriptError
from lecture_pilot.schemas import Lecture
from lecture_pilot.services.llm import prompts
from lecture_pilot.services.llm.client import LLMClient
from lecture_pilot.services.youtube import (
    build_video_url,
    extract_youtube_video_id,
    fetch_video_title,
)

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_CHARS = 50
DEFAULT_TEXT_TITLE = "Lecture 101"
DEFAULT_VIDEO_TITLE = "YouTube Lecture"

DEMO_LECTURE = """[00:00] Welcome to this lecture on Introduction to Machine Learning. Today we are going to dive into the core paradigms: Supervised and Unsupervised learning.
[02:30] First, let's talk about Supervised Learning. Imagine a teacher and a student. The teacher provides problems and correct answers.
[05:45] Common algorithms include Linear Regression for regression problems and Logistic Regression for classification.
[10:15] Now, let's contrast this with Unsupervised Learning. Here, there is no teacher. The algorithm finds patterns in unlabeled data.
[15:20] The most common task here is Clustering, like K-Means clustering.
[20:00] To summarize: Supervised is like learning with an answer key. Unsupervised is like learning a language by listening."""


@dataclass(frozen=True)
class ResolvedTranscript:
    transcript: str
    title: str
    video_id: str | None = None
    video_url: str | None = None

    def to_lecture(self) -> Lecture:
        return Lecture(
            title=self.title,
            transcript=self.transcript,
            video_id=self.video_id,
            video_url=self.video_url,
        )


class FileTranscriber(Protocol):
    """Given an uploaded file, return its transcript text."""

    def transcribe(self, filename: str, content_type: str | None, data: bytes) -> str: ...


class PlainTextTranscriber:
    """Accepts UTF-8 text uploads; anything else is refused."""

    accepted_types = ("text/plain", "text/markdown")
    accepted_suffixes = (".txt", ".md", ".vtt", ".srt")

    def transcribe(self, filename: str, content_type: str | None, data: bytes) -> str:
        name = (filename or "").lower()
        if content_type not in self.accepted_types and not name.endswith(self.accepted_suffixes):
            raise InvalidInputError(f"Unsupported file type: {content_type or name or 'unknown'}")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInputError("Uploaded file is not valid UTF-8 text") from e


def resolve_text(text: str, title: str | None = None) -> ResolvedTranscript:
    text = text or ""
    if len(text) < MIN_TRANSCRIPT_CHARS:
        raise InvalidInputError(
            f"Transcript is too short (minimum {MIN_TRANSCRIPT_CHARS} characters)"
        )
    return ResolvedTranscript(transcript=text, title=(title or "").strip() or DEFAULT_TEXT_TITLE)


def resolve_file(
    transcriber: FileTranscriber,
    filename: str,
    content_type: str | None,
    data: bytes,
) -> ResolvedTranscript:
    text = transcriber.transcribe(filename, content_type, data)
    return resolve_text(text, title=filename.rsplit(".", 1)[0] if filename else None)


async def resolve_video(llm: LLMClient, url: str) -> ResolvedTranscript:
    """
    Video link -> reconstructed transcript.

    1) extract the 11-char video id (invalid link fails before any network call)
    2) look up the real title to help the search (best-effort)
    3) ask the LLM, with web search, to rebuild the spoken content
    """
    url = (url or "").strip()
    video_id = extract_youtube_video_id(url)
    if not video_id:
        raise InvalidInputError("Invalid YouTube URL")

    real_title = await fetch_video_title(url)
    title_context = f'The video title is: "{real_title}".' if real_title else ""

    try:
        transcript = await llm.search_and_generate(
            prompts.VIDEO_TRANSCRIPT_TEMPLATE.format(url=url, title_context=title_context)
        )
    except GenerationError as e:
        logger.error("Video transcript reconstruction failed for %s: %s", video_id, e)
        raise TranscriptError(
            "Failed to analyze video. Please check the link and try again."
        ) from e

    return ResolvedTranscript(
        transcript=transcript,
        title=real_title or DEFAULT_VIDEO_TITLE,
        video_id=video_id,
        video_url=build_video_url(video_id),
    )
