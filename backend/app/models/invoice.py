"""Invoice model. Totals are derived from service items and never stored."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    invoice_number = Column(String(64), nullable=False)
    date = Column(String(32), nullable=False)
    employee_name = Column(String(255), nullable=False)
    employee_id = Column(String(64), nullable=False, index=True)
    employee_email = Column(String(255), nullable=False)
    employee_address = Column(String(1024), nullable=False)
    employee_mobile = Column(String(50), nullable=False)
    tax_rate = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    owner = relationship("User", back_populates="invoices")
    services = relationship(
        "ServiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="ServiceItem.position",
    )
