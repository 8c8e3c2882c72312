import asyncio

from lecture_pilot.services.tutor import (
    GREETING,
    TUTOR_TRANSCRIPT_MAX_CHARS,
    TutorSession,
    build_tutor_messages,
    greeting_message,
)

from conftest import FakeLLM, LECTURE_TEXT


def test_session_starts_with_greeting():
    session = TutorSession(FakeLLM(), LECTURE_TEXT)
    assert len(session.messages) == 1
    assert session.messages[0].sender == "assistant"
    assert session.messages[0].text == GREETING


def test_send_appends_question_and_reply():
    llm = FakeLLM()
    session = TutorSession(llm, LECTURE_TEXT)
    reply = asyncio.run(session.send("What is the first law?"))

    assert reply.text == "Heat added minus work done."
    assert [m.sender for m in session.messages] == ["assistant", "user", "assistant"]
    assert session.messages[1].text == "What is the first law?"
    assert session.composing is False

    sent = llm.chat_messages[0]
    assert sent[0]["role"] == "system"
    assert LECTURE_TEXT in sent[0]["content"]
    assert sent[1] == {"role": "assistant", "content": GREETING}
    assert sent[-1] == {"role": "user", "content": "What is the first law?"}


def test_blank_message_is_ignored():
    llm = FakeLLM()
    session = TutorSession(llm, LECTURE_TEXT)
    assert asyncio.run(session.send("   ")) is None
    assert len(session.messages) == 1
    assert llm.calls == []


def test_failed_reply_keeps_the_question_only():
    session = TutorSession(FakeLLM(fail={"chat"}), LECTURE_TEXT)
    assert asyncio.run(session.send("Why?")) is None
    assert [m.sender for m in session.messages] == ["assistant", "user"]
    assert session.composing is False


def test_on_change_fires_for_each_append():
    seen = []
    session = TutorSession(FakeLLM(), LECTURE_TEXT, on_change=lambda s: seen.append(len(s.messages)))
    asyncio.run(session.send("Explain entropy"))
    assert seen == [2, 3]


def test_composing_is_set_while_waiting():
    async def run():
        gate = asyncio.Event()
        session = TutorSession(FakeLLM(gate=gate), LECTURE_TEXT)
        task = asyncio.create_task(session.send("Explain entropy"))
        await asyncio.sleep(0)
        during = session.composing
        gate.set()
        await task
        return during, session.composing

    assert asyncio.run(run()) == (True, False)


def test_transcript_is_truncated_in_system_prompt():
    long_text = "y" * (TUTOR_TRANSCRIPT_MAX_CHARS + 500)
    messages = build_tutor_messages(long_text, [greeting_message()], "hi")
    assert "y" * TUTOR_TRANSCRIPT_MAX_CHARS in messages[0]["content"]
    assert "y" * (TUTOR_TRANSCRIPT_MAX_CHARS + 1) not in messages[0]["content"]


def test_question_is_announced_as_composing():
    seen = []
    session = TutorSession(
        FakeLLM(),
        LECTURE_TEXT,
        on_change=lambda s: seen.append((s.messages[-1].sender, s.composing)),
    )
    asyncio.run(session.send("Explain entropy"))
    assert seen == [("user", True), ("assistant", False)]
