"""Company profile owned by a user, including bank details for payment instructions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class CompanyInfo(Base):
    __tablename__ = "company_infos"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    company_name = Column(String(255), nullable=False)
    company_address = Column(String(1024), nullable=False)
    company_logo_url = Column(String(512), nullable=True)

    bank_name = Column(String(255), nullable=True)
    account_number = Column(String(64), nullable=True)
    account_holder_name = Column(String(255), nullable=True)
    ifsc_code = Column(String(32), nullable=True)
    branch_name = Column(String(255), nullable=True)
    branch_code = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    user = relationship("User", back_populates="company_info")
