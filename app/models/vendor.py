"""
Vendor Models
Vendor pool with offered services and country coverage
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.service import vendor_services


class Vendor(Base):
    """
    Vendor offering services in one or more countries.

    response_sla_hours is the vendor's committed response window; the SLA
    monitor measures it from the vendor's most recent match.
    """
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    rating = Column(Numeric(3, 2), default=0, nullable=False)  # 0.00 to 5.00
    response_sla_hours = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    services = relationship("Service", secondary=vendor_services, lazy="selectin")
    countries = relationship("VendorCountry", back_populates="vendor", cascade="all, delete-orphan")
    matches = relationship("Match", back_populates="vendor")

    def __repr__(self):
        return f"<Vendor(id={self.id}, name='{self.name}', rating={self.rating})>"


class VendorCountry(Base):
    """Country a vendor covers"""
    __tablename__ = "vendor_countries"

    vendor_id = Column(Integer, ForeignKey("vendors.id"), primary_key=True)
    country = Column(String(2), primary_key=True)

    vendor = relationship("Vendor", back_populates="countries")

    def __repr__(self):
        return f"<VendorCountry(vendor_id={self.vendor_id}, country='{self.country}')>"
