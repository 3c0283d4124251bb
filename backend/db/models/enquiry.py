import uuid
from sqlalchemy import Column, String, DateTime, Text
from db.session import Base


class Enquiry(Base):
    __tablename__ = "enquiries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    number_of_employees = Column(String(32), nullable=True)
    city = Column(String(128), nullable=True)
    seats = Column(String(32), nullable=True)
    workspace_name = Column(String(255), nullable=True)
    workspace_type = Column(String(64), nullable=True)
    message = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)
