from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI
from pydantic import BaseModel
from sqlalchemy import text

from lecture_pilot.api.auth import router as auth_router
from lecture_pilot.api.lectures import router as lectures_router
from lecture_pilot.api.library import router as library_router
from lecture_pilot.api.study_materials import router as study_materials_router
from lecture_pilot.api.tutor import router as tutor_router
from lecture_pilot.controller import AppController
from lecture_pilot.core.logging import configure_logging
from lecture_pilot.db.session import SessionLocal, init_db
from lecture_pilot.services.auth import build_auth_backend
from lecture_pilot.services.llm.client import LLMClient

VERSION = "0.1.0"


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    db_ok: bool


def default_controller() -> AppController:
    return AppController(llm=LLMClient(), auth=build_auth_backend())


def create_app(controller_factory: Callable[[], AppController] = default_controller) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        init_db()
        controller = controller_factory()
        # one auth subscription for the lifetime of the app
        await controller.startup()
        app.state.controller = controller
        try:
            yield
        finally:
            controller.shutdown()

    app = FastAPI(title="Lecture Pilot API", version=VERSION, lifespan=lifespan)
    app.include_router(auth_router)
    app.include_router(lectures_router)
    app.include_router(tutor_router)
    app.include_router(study_materials_router)
    app.include_router(library_router)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        db_ok = False
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            db_ok = True
        except Exception:
            db_ok = False
        finally:
            db.close()

        return HealthResponse(ok=True, service="api", version=app.version, db_ok=db_ok)

    return app


app = create_app()
