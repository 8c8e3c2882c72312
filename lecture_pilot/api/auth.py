from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from lecture_pilot.api.deps import get_controller, http_error, state_payload
from lecture_pilot.controller import AppController
from lecture_pilot.core.errors import AuthError, InvalidTransitionError
from lecture_pilot.schemas import EmailResult, User

router = APIRouter(prefix="/auth", tags=["auth"])


class SignUpRequest(BaseModel):
    email: str
    password: str
    name: str | None = None


class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpResponse(BaseModel):
    ok: bool
    demo: bool
    user: User
    welcome_email: EmailResult


class SignInResponse(BaseModel):
    ok: bool
    demo: bool
    user: User


@router.post("/sign-up", response_model=SignUpResponse)
async def sign_up(req: SignUpRequest, controller: AppController = Depends(get_controller)) -> SignUpResponse:
    try:
        result = await controller.sign_up(req.email.strip(), req.password, (req.name or "").strip() or None)
    except (AuthError, InvalidTransitionError) as e:
        raise http_error(e)
    return SignUpResponse(
        ok=True,
        demo=controller.auth.demo,
        user=controller.state.pending_user,
        welcome_email=result,
    )


@router.post("/sign-in", response_model=SignInResponse)
async def sign_in(req: SignInRequest, controller: AppController = Depends(get_controller)) -> SignInResponse:
    try:
        user = await controller.sign_in(req.email.strip(), req.password)
    except (AuthError, InvalidTransitionError) as e:
        raise http_error(e)
    return SignInResponse(ok=True, demo=controller.auth.demo, user=user)


@router.post("/continue")
def continue_after_sign_up(controller: AppController = Depends(get_controller)):
    """Leave the welcome-email screen and enter the app."""
    try:
        controller.continue_after_sign_up()
    except InvalidTransitionError as e:
        raise http_error(e)
    return state_payload(controller)


@router.post("/sign-out")
async def sign_out(controller: AppController = Depends(get_controller)):
    await controller.sign_out()
    return state_payload(controller)


@router.get("/me", response_model=User)
def me(controller: AppController = Depends(get_controller)) -> User:
    if controller.state.user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return controller.state.user
