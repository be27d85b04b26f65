"""
SQLAlchemy ORM models for stored calculator snapshots.
"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class AuditMixin:
    """Mixin for audit fields on all models."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class CalculatorRecord(AuditMixin, Base):
    """
    One calculator snapshot per property, stored verbatim.

    The high-water columns track the largest line-item id ever issued so
    removed ids are not handed out again.
    """

    __tablename__ = "calculator_data"

    uprn = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False)

    refurb_high_water = Column(Integer, default=0, nullable=False)
    funding_high_water = Column(Integer, default=0, nullable=False)

    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<CalculatorRecord {self.uprn}>"
