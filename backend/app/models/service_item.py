"""Service line item for an invoice."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base


class ServiceItem(Base):
    __tablename__ = "service_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(512), nullable=False, default="")
    hours = Column(Float, nullable=False, default=0.0)
    rate = Column(Float, nullable=False, default=0.0)

    invoice = relationship("Invoice", back_populates="services")

    @property
    def total(self) -> float:
        return (self.hours or 0.0) * (self.rate or 0.0)
