from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clientes_api.services.passwords import MAX_PASSWORD_BYTES, password_too_long


class CaptchaResponse(BaseModel):
    id: str
    question: str


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    usuario: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=8, max_length=MAX_PASSWORD_BYTES)
    captcha_id: str = Field(alias="captchaId", min_length=1, max_length=64)
    captcha_respuesta: str = Field(alias="captchaRespuesta", min_length=1, max_length=16)

    @field_validator("usuario")
    @classmethod
    def normalize_usuario(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < 3:
            raise ValueError("usuario must be at least 3 characters long")
        return cleaned

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value

    @field_validator("captcha_respuesta", mode="before")
    @classmethod
    def stringify_answer(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class UserPublic(BaseModel):
    id_usuario: int
    usuario_login: str
    nombre_completo: Optional[str] = None
    correo: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user: UserPublic
    csrf_token: str = Field(alias="csrfToken")


class CsrfTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    csrf_token: str = Field(alias="csrfToken")
