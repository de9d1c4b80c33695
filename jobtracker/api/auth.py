from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, HTTPException, status
from jobtracker.schemas import LoginRequest, LoginResponse
from jobtracker.auth import verify_password, create_session_token, get_optional_user, COOKIE_NAME

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, request: Request, response: Response):
    settings = request.app.state.settings
    if not body.user_id or not verify_password(body.password, settings):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = create_session_token(body.user_id, settings)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=settings.token_expire_days * 24 * 60 * 60,
        samesite="lax",
    )
    return LoginResponse(success=True, message="Logged in successfully")


@router.post("/logout", response_model=LoginResponse)
async def logout(response: Response):
    response.delete_cookie(COOKIE_NAME)
    return LoginResponse(success=True, message="Logged out successfully")


@router.get("/check")
async def check_auth(user_id: Optional[str] = Depends(get_optional_user)):
    return {"authenticated": user_id is not None, "userId": user_id}
