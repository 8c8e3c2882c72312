from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from lecture_pilot.db.base import Base


class SavedLecture(Base):
    __tablename__ = "saved_lectures"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # source
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    video_id: Mapped[str | None] = mapped_column(String(16), nullable=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcript_text: Mapped[str] = mapped_column(Text, nullable=False)

    # exam configuration the bundle was generated for
    exam_type: Mapped[str] = mapped_column(String(64), nullable=False)
    time_frame: Mapped[str] = mapped_column(String(32), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    materials: Mapped[list["LectureMaterial"]] = relationship(
        back_populates="lecture",
        cascade="all, delete-orphan",
        order_by="LectureMaterial.id",
    )
