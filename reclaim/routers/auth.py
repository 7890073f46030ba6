import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..core.security import verify_password, create_access_token, get_password_hash
from ..core.config import access_token_expires
from ..core.errors import ValidationError
from ..schemas.auth import LoginRequest, SignupRequest, SignupResponse, TokenResponse, UserResponse
from ..models.user import User
from ..repositories.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    users = UserRepository(db)
    if users.find_by_email(payload.email):
        raise ValidationError("User with this email already exists")

    user = users.add(
        User(
            name=payload.name,
            email=payload.email,
            password_hash=get_password_hash(payload.password),
            college=payload.college,
            phone_number=payload.phone_number,
        )
    )
    db.commit()
    db.refresh(user)
    logger.info("New account created user_id=%s", user.id)
    return SignupResponse(user=UserResponse.model_validate(user))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = UserRepository(db).find_by_email(payload.email.strip().lower())
    if not user or not user.password_hash or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": str(user.id), "email": user.email}, access_token_expires())
    return TokenResponse(access_token=token)
