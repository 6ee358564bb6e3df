from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint

from clientes_api.database import Base


class ProfileEntry(Base):
    __tablename__ = "Perfiles"

    id = Column("IdPerfil", Integer, primary_key=True)
    name = Column("NombrePerfil", String(100), nullable=False, unique=True)


class UserProfileEntry(Base):
    __tablename__ = "UsuariosPerfiles"

    id = Column("IdUsuarioPerfil", Integer, primary_key=True)
    user_id = Column(
        "IdUsuario", Integer, ForeignKey("Usuarios.IdUsuario"), nullable=False, index=True
    )
    profile_id = Column(
        "IdPerfil", Integer, ForeignKey("Perfiles.IdPerfil"), nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint("IdUsuario", "IdPerfil", name="uq_usuario_perfil"),
    )


class MenuOptionEntry(Base):
    __tablename__ = "OpcionesMenu"

    id = Column("IdOpcion", Integer, primary_key=True)
    name = Column("NombreOpcion", String(120), nullable=False, unique=True)


class PermissionEntry(Base):
    __tablename__ = "Permisos"

    id = Column("IdPermiso", Integer, primary_key=True)
    profile_id = Column(
        "IdPerfil", Integer, ForeignKey("Perfiles.IdPerfil"), nullable=False, index=True
    )
    option_id = Column(
        "IdOpcion", Integer, ForeignKey("OpcionesMenu.IdOpcion"), nullable=False, index=True
    )
    can_read = Column("PermiteLeer", Boolean, nullable=False, default=False)
    can_create = Column("PermiteCrear", Boolean, nullable=False, default=False)
    can_update = Column("PermiteActualizar", Boolean, nullable=False, default=False)
    can_delete = Column("PermiteEliminar", Boolean, nullable=False, default=False)
