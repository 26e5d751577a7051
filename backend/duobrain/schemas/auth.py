# duobrain/schemas/auth.py
from pydantic import EmailStr, Field, field_validator

from .base import CamelModel


class _EmailIn(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()


class SignupIn(_EmailIn):
    full_name: str = Field(min_length=2)
    password: str = Field(min_length=8)


class LoginIn(_EmailIn):
    password: str = Field(min_length=1)


class OtpRequestIn(_EmailIn):
    pass


class VerifyOtpIn(_EmailIn):
    otp: str = Field(min_length=6, max_length=6, pattern=r"^\d+$")


class UserBrief(CamelModel):
    id: int
    full_name: str
    email: str


class TokenOut(CamelModel):
    token: str
    user: UserBrief


class InitDetailsOut(CamelModel):
    email: str
    full_name: str
    onboarding_done: bool
