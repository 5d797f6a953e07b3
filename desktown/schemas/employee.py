"""Employee portal schemas."""

from pydantic import BaseModel, EmailStr, Field

from desktown.schemas.auth import UserRead


class EmployeeLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class EmployeeLoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRead
