import uuid
from sqlalchemy import Column, String, DateTime, Boolean, Numeric
from db.session import Base


class Workspace(Base):
    __tablename__ = "workspaces"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    workspace_type = Column(String(64), nullable=False)
    amount_per_month = Column(Numeric(12, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, nullable=True)
