# duobrain/api/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from duobrain.api.deps import get_current_principal, get_db_dep, get_settings
from duobrain.core import clock
from duobrain.core.config import SimpleSettings
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.auth import InitDetailsOut, LoginIn, OtpRequestIn, SignupIn, TokenOut, VerifyOtpIn
from duobrain.schemas.base import MessageOut
from duobrain.services.mailer import send_otp_email
from duobrain.services.security import OTP_TTL, create_access_token, generate_otp, hash_password, verify_password

router = APIRouter()

DUPLICATE_EMAIL = "User with this email already exists."


def _find_user(db: Session, email: str):
    return db.execute(select(models.User).where(models.User.email == email)).scalar_one_or_none()


def _token_response(user: models.User, settings: SimpleSettings) -> dict:
    return {
        "token": create_access_token(user.email, settings),
        "user": {"id": user.id, "full_name": user.full_name, "email": user.email},
    }


@router.post("/signup", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupIn, db: Session = Depends(get_db_dep)):
    if _find_user(db, payload.email):
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)
    user = models.User(
        full_name=payload.full_name.strip(),
        email=payload.email,
        hashed_password=hash_password(payload.password),
        income_type=models.IncomeType.monthly,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same email
        db.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)
    return {"message": "User registered successfully."}


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db_dep), settings: SimpleSettings = Depends(get_settings)):
    user = _find_user(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Invalid credentials.")
    return _token_response(user, settings)


@router.post("/send-otp", response_model=MessageOut)
def send_otp(payload: OtpRequestIn, db: Session = Depends(get_db_dep), settings: SimpleSettings = Depends(get_settings)):
    user = _find_user(db, payload.email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    user.otp = generate_otp()
    user.otp_expires = clock.utcnow() + OTP_TTL
    db.add(user)
    db.commit()
    send_otp_email(settings, user.email, user.full_name, user.otp)
    return {"message": "OTP sent to email."}


@router.post("/verify-otp", response_model=TokenOut)
def verify_otp(payload: VerifyOtpIn, db: Session = Depends(get_db_dep), settings: SimpleSettings = Depends(get_settings)):
    user = db.execute(
        select(models.User).where(
            models.User.email == payload.email,
            models.User.otp == payload.otp,
            models.User.otp_expires > clock.utcnow(),
        )
    ).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired OTP. Please try logging in again.")
    # one use only
    user.otp = None
    user.otp_expires = None
    db.add(user)
    db.commit()
    return _token_response(user, settings)


@router.get("/init-details", response_model=InitDetailsOut)
def init_details(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_dep)):
    user = db.get(models.User, principal.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return {"email": user.email, "full_name": user.full_name, "onboarding_done": user.onboarding_done}
