from __future__ import annotations

SUMMARY_TEMPLATE = """You are an expert academic tutor. Summarize the following lecture transcript.
Structure the summary with:
1. A brief overview.
2. Key Concepts (bullet points).
3. Important Definitions.

Keep it clear, concise, and academic.

Lecture Text:
{transcript}
"""

CHAPTERS_TEMPLATE = """Analyze this lecture transcript. Divide it into logical "Chapters" or segments.
For each segment, estimate a timestamp (assume the lecture is about 60 minutes long if no timestamps are present in text) where this topic likely starts.
Provide a title and a very brief 1-sentence summary for each chapter.

Lecture Text:
{transcript}
"""

FORMULAS_TEMPLATE = """Identify all important mathematical formulas, scientific equations, or key structural arguments in this lecture.
If it's a non-math lecture, identify key "Rules" or "Laws".
Return them as a list.

Lecture Text:
{transcript}
"""

STRATEGY_TEMPLATE = """Analyze this lecture for a student preparing for a "{exam_type}" in "{time_frame}".
Identify high-yield topics.
Identify lower probability topics.
Give 2 sentences of strategic advice.

Lecture Text:
{transcript}
"""

QUIZ_TEMPLATE = """Create a multiple-choice quiz with EXACTLY {count} questions based on the lecture.
Strict Requirement: The output array MUST contain {count} items.
Test conceptual understanding and key details.
Provide 4 options per question. correctAnswerIndex is 0-based.

Lecture Text:
{transcript}
"""

FLASHCARDS_TEMPLATE = """Create {count} active-recall flashcards from this lecture.

Lecture Text:
{transcript}
"""

CHEAT_SHEET_TEMPLATE = """Create a "Cheat Sheet" for this lecture.
Condensed, Markdown format, tables for comparisons, bold keywords, short formulas.

Lecture Text:
{transcript}
"""

VIDEO_TRANSCRIPT_TEMPLATE = """I have a YouTube video link: {url}. {title_context}
Use web search to find the actual content, transcript, or a very detailed summary of this specific video.
Then, generate a realistic lecture transcript (approx 800-1000 words) that accurately reflects the ACTUAL content of the video found via search.
If you cannot find the specific transcript, find a high-quality summary of this specific video topic and format it as a lecture transcript.
Include [MM:SS] timestamps occasionally.
Start with "Welcome..."
"""

TUTOR_SYSTEM_TEMPLATE = """You are a helpful AI tutor for a specific lecture.
Use ONLY the provided transcript to answer the student's question.
If the answer is not in the transcript, say "I couldn't find that in the lecture."

If the student says they have no more questions or "I'm done", suggest they take the Quiz to test their knowledge.

Transcript Context:
{transcript}
"""


# ----------------------------
# JSON schemas (strict mode: every object closed, every property required)
# ----------------------------

def _array_of(item: dict) -> dict:
    # strict structured output needs an object at the root
    return {
        "type": "object",
        "properties": {"items": {"type": "array", "items": item}},
        "required": ["items"],
        "additionalProperties": False,
    }


CHAPTERS_SCHEMA = _array_of(
    {
        "type": "object",
        "properties": {
            "timestamp": {"type": "string", "description": "Time format MM:SS"},
            "title": {"type": "string"},
            "summary": {"type": "string"},
        },
        "required": ["timestamp", "title", "summary"],
        "additionalProperties": False,
    }
)

FORMULAS_SCHEMA = _array_of(
    {
        "type": "object",
        "properties": {
            "expression": {"type": "string", "description": "The formula or equation"},
            "description": {"type": "string", "description": "What this formula calculates"},
        },
        "required": ["expression", "description"],
        "additionalProperties": False,
    }
)

STRATEGY_SCHEMA = {
    "type": "object",
    "properties": {
        "priorityTopics": {"type": "array", "items": {"type": "string"}},
        "skipTopics": {"type": "array", "items": {"type": "string"}},
        "focusAdvice": {"type": "string"},
    },
    "required": ["priorityTopics", "skipTopics", "focusAdvice"],
    "additionalProperties": False,
}

QUIZ_SCHEMA = _array_of(
    {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "question": {"type": "string"},
            "options": {"type": "array", "items": {"type": "string"}},
            "correctAnswerIndex": {"type": "integer"},
            "explanation": {"type": "string"},
        },
        "required": ["id", "question", "options", "correctAnswerIndex", "explanation"],
        "additionalProperties": False,
    }
)

FLASHCARDS_SCHEMA = _array_of(
    {
        "type": "object",
        "properties": {
            "id": {"type": "integer"},
            "front": {"type": "string"},
            "back": {"type": "string"},
        },
        "required": ["id", "front", "back"],
        "additionalProperties": False,
    }
)
