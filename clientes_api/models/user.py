from sqlalchemy import Boolean, Column, Integer, String

from clientes_api.database import Base


class UserEntry(Base):
    __tablename__ = "Usuarios"

    id = Column("IdUsuario", Integer, primary_key=True)
    login = Column("UsuarioLogin", String(100), nullable=False, unique=True, index=True)
    full_name = Column("NombreCompleto", String(200), nullable=True)
    email = Column("Correo", String(255), nullable=True)
    password_hash = Column("ContrasenaHash", String(255), nullable=False)
    active = Column("Estado", Boolean, nullable=False, default=True)
