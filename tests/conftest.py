import asyncio
import os

# settings are read at import time
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
for _name in (
    "OPENAI_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "EMAILJS_SERVICE_ID",
    "EMAILJS_TEMPLATE_ID",
    "EMAILJS_PUBLIC_KEY",
):
    os.environ[_name] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from lecture_pilot.controller import AppController  # noqa: E402
from lecture_pilot.core.errors import GenerationError  # noqa: E402
from lecture_pilot.main import create_app  # noqa: E402
from lecture_pilot.services.auth import DemoAuth  # noqa: E402

LECTURE_TEXT = (
    "[00:00] Welcome to this lecture on thermodynamics. Energy is conserved in a closed system. "
    "[05:00] The first law states that dU = Q - W, where Q is heat added and W is work done. "
    "[12:00] Entropy never decreases in an isolated system, which is the second law."
)


def quiz_payload(count: int = 10) -> dict:
    return {
        "items": [
            {
                "id": i + 1,
                "question": f"Question {i + 1}?",
                "options": ["A", "B", "C", "D"],
                "correctAnswerIndex": i % 4,
                "explanation": f"Because {i % 4}.",
            }
            for i in range(count)
        ]
    }


DEFAULT_JSON = {
    "chapters": {
        "items": [
            {"timestamp": "00:00", "title": "Energy", "summary": "Energy is conserved."},
            {"timestamp": "05:00", "title": "First law", "summary": "dU = Q - W."},
        ]
    },
    "formulas": {"items": [{"expression": "dU = Q - W", "description": "First law of thermodynamics"}]},
    "exam_strategy": {
        "priorityTopics": ["First law"],
        "skipTopics": ["History of steam engines"],
        "focusAdvice": "Drill the sign conventions. Practice worked problems.",
    },
    "quiz": quiz_payload(),
    "flashcards": {
        "items": [
            {"id": 1, "front": "First law?", "back": "dU = Q - W"},
            {"id": 2, "front": "Second law?", "back": "Entropy never decreases"},
            {"id": 3, "front": "Closed system?", "back": "No mass transfer"},
        ]
    },
}


class FakeLLM:
    """
    Stands in for LLMClient. `fail` names the requests that raise:
    summary, cheat_sheet, chapters, formulas, exam_strategy, quiz, flashcards,
    search, chat.
    """

    def __init__(self, *, fail=(), json_overrides=None, gate: asyncio.Event | None = None):
        self.fail = set(fail)
        self.json_overrides = dict(json_overrides or {})
        self.gate = gate
        self.calls: list[str] = []
        self.prompts: dict[str, str] = {}
        self.chat_messages: list[list[dict]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self, kind: str, prompt: str) -> None:
        self.calls.append(kind)
        self.prompts[kind] = prompt
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
        finally:
            self.in_flight -= 1
        if kind in self.fail:
            raise GenerationError(f"{kind} exploded")

    async def generate_text(self, prompt: str, *, system: str | None = None) -> str:
        kind = "summary" if "Summarize" in prompt else "cheat_sheet"
        await self._enter(kind, prompt)
        return "Overview of thermodynamics." if kind == "summary" else "| Law | Statement |"

    async def generate_json(self, prompt, schema, *, name="response", system=None):
        await self._enter(name, prompt)
        if name in self.json_overrides:
            return self.json_overrides[name]
        return DEFAULT_JSON[name]

    async def search_and_generate(self, prompt: str) -> str:
        await self._enter("search", prompt)
        return "Welcome... " + LECTURE_TEXT

    async def chat(self, messages: list[dict]) -> str:
        self.chat_messages.append(messages)
        await self._enter("chat", messages[-1]["content"])
        return "Heat added minus work done."


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def controller(fake_llm):
    return AppController(llm=fake_llm, auth=DemoAuth())


@pytest.fixture
def client(controller):
    app = create_app(lambda: controller)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signed_in_client(client):
    r = client.post("/auth/sign-in", json={"email": "student@example.com", "password": "pw"})
    assert r.status_code == 200
    return client


@pytest.fixture
def dashboard_client(signed_in_client):
    r = signed_in_client.post(
        "/lectures/from-text",
        json={"text": LECTURE_TEXT, "exam_type": "School Test", "time_frame": "1 Day"},
    )
    assert r.status_code == 200
    assert r.json()["state"]["view"] == "DASHBOARD"
    return signed_in_client
