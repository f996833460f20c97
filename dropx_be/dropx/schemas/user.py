from pydantic import BaseModel, EmailStr, Field


class RegisterSchema(BaseModel):
    fullName: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = None
    password: str = Field(min_length=6)


class LoginSchema(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    fullName: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = None


class ProfileOut(BaseModel):
    id: int
    fullName: str
    email: EmailStr
    phone: str | None = None
    avatarUrl: str | None = None
    createdAt: str | None = None


class PasswordChange(BaseModel):
    currentPassword: str
    newPassword: str
    confirmPassword: str
