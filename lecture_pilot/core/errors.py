class LecturePilotError(Exception):
    """Base class for every error the service raises on purpose."""


class InvalidInputError(LecturePilotError, ValueError):
    """Rejected before any network call (bad link, short transcript, ...)."""


class GenerationError(LecturePilotError):
    """The generative content API failed or returned nothing usable."""


class TranscriptError(GenerationError):
    pass


class AuthError(LecturePilotError):
    """Identity backend refused the request; message is shown verbatim."""


class InvalidTransitionError(LecturePilotError):
    def __init__(self, action: str, view: str) -> None:
        super().__init__(f"Cannot {action} while in view {view}")
        self.action = action
        self.view = view
