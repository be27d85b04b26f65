"""
Database configuration and models.
"""

from propcalc.db.database import engine, SessionLocal, get_db
from propcalc.db.models import Base, CalculatorRecord

__all__ = ["engine", "SessionLocal", "get_db", "Base", "CalculatorRecord"]
