from sqlalchemy import Column, DateTime, Integer, String, Text, func

from clientes_api.database import Base


class AuditEntry(Base):
    __tablename__ = "Auditoria"

    id = Column(Integer, primary_key=True)
    entidad = Column(String(120), nullable=False)
    entidad_id = Column(String(100), nullable=True)
    operacion = Column(String(20), nullable=False)
    realizado_por = Column(Integer, nullable=True)
    detalles = Column(Text, nullable=True)
    ip = Column(String(50), nullable=True)
    fecha = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
