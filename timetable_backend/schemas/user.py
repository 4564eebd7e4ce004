from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from timetable_backend.utils.hashing import BCRYPT_MAX_BYTES, password_too_long


class UserBase(BaseModel):
    username: str


class UserCreate(UserBase):
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def _username(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v):
        return v.lower()

    @field_validator("password")
    @classmethod
    def _password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if password_too_long(v):
            raise ValueError(f"Password too long (max {BCRYPT_MAX_BYTES} bytes)")
        return v


class UserOut(UserBase):
    id: int
    email: str
    model_config = ConfigDict(from_attributes=True)


class RegisterOut(BaseModel):
    user: UserOut
    token: str
