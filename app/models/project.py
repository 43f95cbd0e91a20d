"""
Project Model
Client expansion projects matched against the vendor pool
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.service import project_services


class ProjectStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Project(Base):
    """
    Expansion project of a client into one country.

    Only ACTIVE projects take part in the daily match refresh.
    """
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    # ISO 3166-1 alpha-2, stored upper case
    country = Column(String(2), nullable=False, index=True)
    budget = Column(Numeric(12, 2), nullable=False)
    status = Column(
        Enum(ProjectStatus, name="project_status", values_callable=lambda e: [m.value for m in e]),
        default=ProjectStatus.DRAFT,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    client = relationship("Client", back_populates="projects")
    required_services = relationship("Service", secondary=project_services, lazy="selectin")
    matches = relationship("Match", back_populates="project")

    def __repr__(self):
        return f"<Project(id={self.id}, country='{self.country}', status='{self.status}')>"
