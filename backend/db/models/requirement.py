import uuid
from sqlalchemy import Column, String, DateTime, Text
from db.session import Base


class Requirement(Base):
    __tablename__ = "requirements"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    city = Column(String(128), nullable=False)
    seats = Column(String(32), nullable=True)
    workspace_type = Column(String(64), nullable=True)
    message = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)
