from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from clientes_api.database import Base


class ClienteEntry(Base):
    __tablename__ = "Clientes"

    cliente_id = Column(Integer, primary_key=True)
    tipo_documento = Column(String(20), nullable=True)
    numero_documento = Column(String(50), nullable=True)
    nombre = Column(String(255), nullable=False)
    correo = Column(String(255), nullable=True)
    telefono = Column(String(50), nullable=True)
    direccion = Column(String(500), nullable=True)
    datos_extra = Column(Text, nullable=True)
    creado_por = Column(Integer, nullable=True)
    fecha_creacion = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    modificado_por = Column(Integer, nullable=True)
    fecha_modificacion = Column(DateTime(timezone=True), nullable=True)
    activo = Column(Boolean, nullable=False, default=True)

    def to_dict(self, not_included_columns=None):
        if not_included_columns is None:
            not_included_columns = []

        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in not_included_columns
        }
