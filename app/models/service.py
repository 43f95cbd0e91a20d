"""
Service Model
Join point between project requirements and vendor offerings
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Table
from app.database import Base


# Services a project requires
project_services = Table(
    "project_services",
    Base.metadata,
    Column("project_id", Integer, ForeignKey("projects.id"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id"), primary_key=True),
)

# Services a vendor offers
vendor_services = Table(
    "vendor_services",
    Base.metadata,
    Column("vendor_id", Integer, ForeignKey("vendors.id"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id"), primary_key=True),
)


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    def __repr__(self):
        return f"<Service(id={self.id}, name='{self.name}')>"
