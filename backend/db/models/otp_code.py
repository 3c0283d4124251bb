import uuid
from sqlalchemy import Column, String, DateTime, Boolean, Index
from db.session import Base


class OtpCode(Base):
    __tablename__ = "otp_codes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), index=True, nullable=False)
    code = Column(String(10), nullable=False)
    type = Column(String(32), nullable=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_otp_codes_email_type_used", "email", "type", "used"),
    )
