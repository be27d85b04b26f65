"""
Calculator snapshot store.

Persists snapshots verbatim, keyed by property UPRN. Recalculation is not
done here; callers run the engine on what they load.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from propcalc.calculations.snapshot import CalculatorSnapshot, default_snapshot
from propcalc.db.models import CalculatorRecord
from propcalc.services.line_items import LineItemKind, highest_id

logger = logging.getLogger(__name__)


class CalculatorStore:
    """Read and write calculator snapshots through a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def get_record(self, uprn: str) -> Optional[CalculatorRecord]:
        return self.db.get(CalculatorRecord, uprn)

    def load(self, uprn: str) -> Optional[CalculatorSnapshot]:
        record = self.get_record(uprn)
        if record is None:
            return None
        return CalculatorSnapshot.model_validate(record.data)

    def save(self, uprn: str, snapshot: CalculatorSnapshot) -> CalculatorRecord:
        """Insert or replace the snapshot for a property."""
        record = self.get_record(uprn)
        if record is None:
            record = CalculatorRecord(uprn=uprn, refurb_high_water=0, funding_high_water=0)
            self.db.add(record)

        record.data = snapshot.to_storage()
        record.refurb_high_water = max(
            record.refurb_high_water or 0,
            highest_id(snapshot, LineItemKind.refurb_items),
        )
        record.funding_high_water = max(
            record.funding_high_water or 0,
            highest_id(snapshot, LineItemKind.funding_sources),
        )
        record.last_updated = datetime.utcnow()

        self.db.commit()
        self.db.refresh(record)
        logger.info(f"Saved calculator data for {uprn}")
        return record

    def delete(self, uprn: str) -> bool:
        record = self.get_record(uprn)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        logger.info(f"Deleted calculator data for {uprn}")
        return True

    def reset(self, uprn: str, purchase_price: Optional[float] = None) -> CalculatorRecord:
        """Overwrite with a blank calculator, optionally seeded with a price."""
        return self.save(uprn, default_snapshot(purchase_price))

    def high_water(self, uprn: str, kind: LineItemKind) -> int:
        record = self.get_record(uprn)
        if record is None:
            return 0
        if kind == LineItemKind.refurb_items:
            return record.refurb_high_water or 0
        return record.funding_high_water or 0

    def backfill(
        self, uprns: List[str], purchase_prices: Optional[Dict[str, float]] = None
    ) -> List[str]:
        """
        Create default snapshots for properties that have none.

        Returns:
            The UPRNs that were created
        """
        purchase_prices = purchase_prices or {}
        created = []
        for uprn in uprns:
            if self.get_record(uprn) is not None:
                continue
            self.save(uprn, default_snapshot(purchase_prices.get(uprn)))
            created.append(uprn)
        logger.info(f"Backfilled calculator data for {len(created)} of {len(uprns)} properties")
        return created
