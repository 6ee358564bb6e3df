from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClienteCreate(BaseModel):
    tipo_documento: Optional[str] = Field(default=None, max_length=20)
    numero_documento: Optional[str] = Field(default=None, max_length=50)
    nombre: str = Field(max_length=255)
    correo: Optional[str] = Field(default=None, max_length=255)
    telefono: Optional[str] = Field(default=None, max_length=50)
    direccion: Optional[str] = Field(default=None, max_length=500)
    datos_extra: Optional[str] = None

    @field_validator("nombre")
    @classmethod
    def normalize_nombre(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < 3:
            raise ValueError("nombre is required and must be at least 3 characters long")
        return cleaned

    @field_validator(
        "tipo_documento", "numero_documento", "telefono", "direccion", "datos_extra"
    )
    @classmethod
    def normalize_optional_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @field_validator("correo")
    @classmethod
    def normalize_correo(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            return None
        if "@" not in cleaned:
            raise ValueError("correo is not a valid email address")
        return cleaned


class ClienteUpdate(ClienteCreate):
    activo: bool = True


class ClienteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cliente_id: int
    tipo_documento: Optional[str] = None
    numero_documento: Optional[str] = None
    nombre: str
    correo: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    datos_extra: Optional[str] = None
    creado_por: Optional[int] = None
    fecha_creacion: Optional[datetime] = None
    modificado_por: Optional[int] = None
    fecha_modificacion: Optional[datetime] = None
    activo: bool


class MessageResponse(BaseModel):
    message: str
