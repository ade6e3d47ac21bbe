from pydantic import BaseModel, EmailStr
from typing import Optional, Dict, Any


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    username: Optional[str] = None


class SignupResponse(BaseModel):
    user_id: str
    email: str
    profile: Optional[Dict[str, Any]] = None
    access_token: Optional[str] = None
    confirmation_required: bool = False
    message: str
