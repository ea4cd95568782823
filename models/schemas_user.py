from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime

# Request bodies keep every field optional so that the handlers can answer
# missing input with a 400 envelope instead of FastAPI's 422.

class UserRegister(BaseModel):
    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
    school_name: str | None = Field(default=None, alias="schoolName")
    password: str | None = None
    confirm_password: str | None = Field(default=None, alias="confirmPassword")
    class Config:
        populate_by_name = True

class UserVerify(BaseModel):
    email: str | None = None
    code: str | None = None

class UserLogin(BaseModel):
    email: str | None = None
    password: str | None = None

class ForgotPasswordRequest(BaseModel):
    email: str | None = None

class ResetPasswordRequest(BaseModel):
    token: str | None = None
    password: str | None = None
    confirm_password: str | None = Field(default=None, alias="confirmPassword")
    class Config:
        populate_by_name = True

class RefreshTokenRequest(BaseModel):
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    class Config:
        populate_by_name = True

class UserUpdate(BaseModel):
    full_name: str | None = Field(default=None, alias="fullName")
    school_name: str | None = Field(default=None, alias="schoolName")
    class Config:
        populate_by_name = True

class UserOut(BaseModel):
    id: str
    full_name: str
    email: str
    school_name: str
    is_verified: bool
    created_at: datetime
    updated_at: datetime | None = None
    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
