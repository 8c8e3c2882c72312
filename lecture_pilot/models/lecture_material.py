from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lecture_pilot.db.base import Base


class LectureMaterial(Base):
    __tablename__ = "lecture_materials"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    lecture_id: Mapped[int] = mapped_column(
        ForeignKey("saved_lectures.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # summary | chapters | formulas | strategy | quiz | flashcards | cheat_sheet
    kind: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    content_json: Mapped[str] = mapped_column(Text, nullable=False)  # JSON string

    lecture: Mapped["SavedLecture"] = relationship(back_populates="materials")
