"""
Match Model
Persisted (project, vendor, score) associations
"""

from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, Numeric, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base


class Match(Base):
    """
    Score of one vendor for one project.

    At most one row per (project_id, vendor_id), enforced by
    uq_matches_project_vendor. created_at is written once on insert;
    updated_at moves on every recompute.
    """
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False, index=True)

    score = Column(Numeric(5, 2), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="matches")
    vendor = relationship("Vendor", back_populates="matches")

    __table_args__ = (
        UniqueConstraint("project_id", "vendor_id", name="uq_matches_project_vendor"),
        Index("idx_matches_created_at", "created_at"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "vendor_id": self.vendor_id,
            "score": float(self.score) if self.score is not None else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Match(id={self.id}, project_id={self.project_id}, vendor_id={self.vendor_id}, score={self.score})>"
