from typing import Optional, Dict, Any
from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    """Schema for landlord and renter signup"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=120)


class LoginRequest(BaseModel):
    """Schema for login request"""
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserOut(BaseModel):
    """Schema for user response"""
    id: int
    email: str
    name: str
    role: str
    current_property_id: Optional[int] = None
    current_property_details: Optional[Dict[str, Any]] = None

    model_config = {
        "from_attributes": True,
    }


class LoginResponse(BaseModel):
    """Schema for login response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    redirect: str
    user: UserOut


class RefreshTokenRequest(BaseModel):
    """Schema for refresh token request"""
    refresh_token: str


class RefreshTokenResponse(BaseModel):
    """Schema for refresh token response"""
    access_token: str
    token_type: str = "bearer"


class ChangePasswordRequest(BaseModel):
    """Schema for change password request"""
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserCreate(BaseModel):
    """Schema for creating a user from the admin panel"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(None, max_length=120)
    role: str
