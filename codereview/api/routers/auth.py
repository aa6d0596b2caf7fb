from fastapi import APIRouter, Depends, Response, status

from codereview.api.deps import get_container, get_current_user
from codereview.container import Container
from codereview.core import get_config
from codereview.core.context import AuthenticatedUser
from codereview.schemas import (
    ApiResponse,
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
    ok,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_auth_cookie(response: Response, token: str) -> None:
    auth = get_config().AUTH
    response.set_cookie(
        auth.COOKIE_NAME,
        token,
        max_age=auth.JWT_EXPIRES_IN,
        httponly=True,
        secure=auth.COOKIE_SECURE,
        samesite="lax",
    )


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, container: Container = Depends(get_container)) -> ApiResponse:
    user = await container.auth_service.register(payload)
    return ok(
        UserResponse.model_validate(user, from_attributes=True),
        "Registration successful. Please check your email to verify your account.",
    )


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(
    payload: LoginRequest, response: Response, container: Container = Depends(get_container)
) -> ApiResponse:
    token, user = await container.auth_service.login(payload.email, payload.password)
    _set_auth_cookie(response, token)
    return ok(TokenResponse(access_token=token, user=UserResponse.model_validate(user, from_attributes=True)))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(response: Response) -> ApiResponse:
    response.delete_cookie(get_config().AUTH.COOKIE_NAME)
    return ok(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(
    actor: AuthenticatedUser = Depends(get_current_user), container: Container = Depends(get_container)
) -> ApiResponse:
    user = await container.user_service.get_user(actor.id, actor)
    return ok(UserResponse.model_validate(user, from_attributes=True))


@router.get("/verify-email/{token}", response_model=ApiResponse[None])
async def verify_email(token: str, container: Container = Depends(get_container)) -> ApiResponse:
    await container.auth_service.verify_email(token)
    return ok(message="Email verified successfully")


@router.post("/resend-verification", response_model=ApiResponse[None])
async def resend_verification(payload: EmailRequest, container: Container = Depends(get_container)) -> ApiResponse:
    await container.auth_service.resend_verification(payload.email)
    return ok(message="If an account exists for this email, a verification link has been sent")


@router.post("/forgot-password", response_model=ApiResponse[None])
async def forgot_password(payload: EmailRequest, container: Container = Depends(get_container)) -> ApiResponse:
    await container.auth_service.forgot_password(payload.email)
    return ok(message="If an account exists for this email, a password reset link has been sent")


@router.post("/reset-password/{token}", response_model=ApiResponse[None])
async def reset_password(
    token: str, payload: ResetPasswordRequest, container: Container = Depends(get_container)
) -> ApiResponse:
    await container.auth_service.reset_password(token, payload.password)
    return ok(message="Password has been reset successfully")
