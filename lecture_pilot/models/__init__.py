from lecture_pilot.models.saved_lecture import SavedLecture
from lecture_pilot.models.lecture_material import LectureMaterial

__all__ = ["SavedLecture", "LectureMaterial"]
