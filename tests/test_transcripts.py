import asyncio

import pytest

from lecture_pilot.core.errors import InvalidInputError, TranscriptError
from lecture_pilot.services import transcripts
from lecture_pilot.services.transcripts import (
    DEFAULT_TEXT_TITLE,
    DEFAULT_VIDEO_TITLE,
    PlainTextTranscriber,
    resolve_file,
    resolve_text,
    resolve_video,
)

from conftest import FakeLLM, LECTURE_TEXT

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_short_text_is_rejected():
    with pytest.raises(InvalidInputError):
        resolve_text("x" * 49)


def test_text_of_minimum_length_is_accepted():
    resolved = resolve_text("x" * 50)
    assert resolved.title == DEFAULT_TEXT_TITLE
    assert resolved.video_id is None


def test_text_keeps_given_title():
    assert resolve_text(LECTURE_TEXT, "  Thermo  ").title == "Thermo"


def test_file_title_is_filename_without_extension():
    resolved = resolve_file(PlainTextTranscriber(), "thermo.notes.txt", "text/plain", LECTURE_TEXT.encode())
    assert resolved.title == "thermo.notes"
    assert resolved.transcript == LECTURE_TEXT


@pytest.mark.parametrize(
    "filename,content_type,data",
    [
        ("slides.pdf", "application/pdf", b"%PDF-1.4"),
        ("notes.txt", "text/plain", b"\xff\xfe\x00bad"),
    ],
)
def test_file_rejections(filename, content_type, data):
    with pytest.raises(InvalidInputError):
        resolve_file(PlainTextTranscriber(), filename, content_type, data)


def test_invalid_video_url_makes_no_calls(monkeypatch):
    async def no_lookup(url, **kwargs):
        raise AssertionError("title lookup should not happen")

    monkeypatch.setattr(transcripts, "fetch_video_title", no_lookup)
    llm = FakeLLM()
    with pytest.raises(InvalidInputError):
        asyncio.run(resolve_video(llm, "https://example.com/watch?v=nope"))
    assert llm.calls == []


def test_video_uses_looked_up_title(monkeypatch):
    async def lookup(url, **kwargs):
        return "Thermodynamics in 10 minutes"

    monkeypatch.setattr(transcripts, "fetch_video_title", lookup)
    llm = FakeLLM()
    resolved = asyncio.run(resolve_video(llm, VIDEO_URL))

    assert resolved.title == "Thermodynamics in 10 minutes"
    assert resolved.video_id == "dQw4w9WgXcQ"
    assert resolved.video_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert resolved.transcript.startswith("Welcome")
    assert '"Thermodynamics in 10 minutes"' in llm.prompts["search"]


def test_video_without_title_gets_default(monkeypatch):
    async def lookup(url, **kwargs):
        return None

    monkeypatch.setattr(transcripts, "fetch_video_title", lookup)
    resolved = asyncio.run(resolve_video(FakeLLM(), VIDEO_URL))
    assert resolved.title == DEFAULT_VIDEO_TITLE


def test_search_failure_is_a_transcript_error(monkeypatch):
    async def lookup(url, **kwargs):
        return None

    monkeypatch.setattr(transcripts, "fetch_video_title", lookup)
    with pytest.raises(TranscriptError) as exc:
        asyncio.run(resolve_video(FakeLLM(fail={"search"}), VIDEO_URL))
    assert "Failed to analyze video" in str(exc.value)
