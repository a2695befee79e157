"""
Authentication endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.core.security import verify_password, create_access_token
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from app.services.user_service import get_user_by_email, register_user
from app.utils.datetime_utils import now_utc

router = APIRouter()


def _issue_token(user: User) -> TokenResponse:
    # JWT 'sub' claim must be a string per JWT spec
    token_data = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
    }
    return TokenResponse(access_token=create_access_token(data=token_data))


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token

    Rejects unknown emails, wrong passwords and inactive accounts.
    """
    user = get_user_by_email(db, login_data.email)

    if not user or not verify_password(login_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    user.last_login_at = now_utc()
    db.commit()

    return _issue_token(user)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Create an account and sign it in

    The first account in an empty system becomes HR_ADMIN.
    """
    user = register_user(db, data.email, data.password, data.name)
    return _issue_token(user)
