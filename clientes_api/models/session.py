from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from clientes_api.database import Base


class SessionEntry(Base):
    __tablename__ = "SesionesSeguras"

    id = Column("IdSesion", Integer, primary_key=True)
    token = Column("TokenSesion", String(200), nullable=False, unique=True, index=True)
    user_id = Column(
        "IdUsuario", Integer, ForeignKey("Usuarios.IdUsuario"), nullable=False, index=True
    )
    created_at = Column("FechaInicio", DateTime(timezone=True), nullable=False)
    expires_at = Column("FechaExpiracion", DateTime(timezone=True), nullable=False)
    user_agent = Column("UserAgent", String(300), nullable=True)
    ip_address = Column("IpConexion", String(50), nullable=True)
    active = Column("Estado", Boolean, nullable=False, default=True)
