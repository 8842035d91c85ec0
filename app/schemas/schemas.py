"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Account bodies are loose on purpose: every profile field is an optional
string (numbers are coerced) and unknown fields are ignored. Which fields a
role may actually store is decided in app.models.roles.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    faculty = "faculty"
    tpo = "tpo"
    admin = "admin"


# ============================================================
# ACCOUNT SCHEMAS
# ============================================================

class AccountPayload(BaseModel):
    """Body of register and update. `role` / `accessLevel` are accepted but never stored from here."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    year: Optional[str] = None
    course: Optional[str] = None
    cgpa: Optional[str] = None
    skills: Optional[str] = None
    employeeId: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[str] = None
    accessLevel: Optional[str] = None
    role: Optional[str] = None


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None

class ForgotPasswordRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None

class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    password: Optional[str] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str

class ForgotPasswordResponse(BaseModel):
    message: str
    resetToken: Optional[str] = None

class LoginAnyRoleResponse(BaseModel):
    message: str
    role: UserRole
    user: dict

class ErrorResponse(BaseModel):
    message: str
    error: Optional[str] = None
