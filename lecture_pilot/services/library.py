from __future__ import annotations

import json
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lecture_pilot.models import LectureMaterial, SavedLecture
from lecture_pilot.schemas import ExamType, Lecture, StudyBundle, TimeFrame

KINDS = ["summary", "chapters", "formulas", "strategy", "quiz", "flashcards", "cheat_sheet"]


def save_lecture(
    db: Session,
    user_id: str,
    lecture: Lecture,
    bundle: StudyBundle,
    exam_type: ExamType,
    time_frame: TimeFrame,
) -> SavedLecture:
    row = SavedLecture(
        user_id=user_id,
        title=lecture.title,
        video_id=lecture.video_id,
        video_url=lecture.video_url,
        transcript_text=lecture.transcript,
        exam_type=exam_type.value,
        time_frame=time_frame.value,
    )
    content = bundle.model_dump(mode="json")
    for kind in KINDS:
        row.materials.append(
            LectureMaterial(kind=kind, content_json=json.dumps(content[kind], ensure_ascii=False))
        )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def list_lectures(db: Session, user_id: str, *, limit: int = 20, offset: int = 0) -> tuple[int, list[SavedLecture]]:
    total = db.scalar(
        select(func.count()).select_from(SavedLecture).where(SavedLecture.user_id == user_id)
    )
    rows = db.scalars(
        select(SavedLecture)
        .where(SavedLecture.user_id == user_id)
        .order_by(SavedLecture.created_at.desc(), SavedLecture.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return int(total or 0), list(rows)


def get_lecture(db: Session, user_id: str, lecture_id: int) -> SavedLecture:
    row = db.get(SavedLecture, lecture_id)
    if row is None or row.user_id != user_id:
        raise LookupError("Saved lecture not found")
    return row


def load_bundle(row: SavedLecture) -> StudyBundle:
    content: dict[str, Any] = {m.kind: json.loads(m.content_json) for m in row.materials}
    missing = [k for k in KINDS if k not in content]
    if missing:
        raise ValueError(f"Materials missing for kinds: {', '.join(missing)}")
    return StudyBundle.model_validate(content)


def lecture_summary(row: SavedLecture) -> dict[str, Any]:
    return {
        "id": row.id,
        "title": row.title,
        "video_id": row.video_id,
        "video_url": row.video_url,
        "exam_type": row.exam_type,
        "time_frame": row.time_frame,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
