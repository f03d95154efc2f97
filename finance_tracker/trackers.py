from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from finance_tracker.core.models import Record
from finance_tracker.store import SectionLines, SectionedRecordStore


@dataclass(frozen=True)
class TrackerSchema:
    """Where a kind of entry lives in the store and what its category is called."""

    name: str
    section: str
    category_label: str = "type"

    @property
    def field_labels(self):
        return ("date", self.category_label, "amount", "description")


SCHEMAS: Dict[str, TrackerSchema] = {
    "transactions": TrackerSchema("transactions", "Transactions", "type"),
    "income": TrackerSchema("income", "Income", "source"),
    "expense": TrackerSchema("expense", "Expense", "type"),
}


class Tracker:
    """A :class:`SectionedRecordStore` bound to one section."""

    def __init__(self, store: SectionedRecordStore, schema: TrackerSchema) -> None:
        self.store = store
        self.schema = schema

    @property
    def section(self) -> str:
        return self.schema.section

    def add(self, date: str, category: str, amount, description: str) -> bool:
        return self.store.append_record(
            self.section, Record(date, category, amount, description)
        )

    def delete(self, date: str, category: str, amount, description: str) -> bool:
        return self.store.delete_record(
            self.section, Record(date, category, amount, description)
        )

    def total_for_month(self, month: str, category: Optional[str] = None) -> Decimal:
        return self.store.aggregate_for_month(self.section, month, category)

    def lines(self) -> SectionLines:
        return self.store.list_records(self.section)

    def entries(self) -> List[Record]:
        return self.store.records(self.section)

    def __repr__(self) -> str:
        return f"Tracker({self.schema.name!r}, {str(self.store.path)!r})"


def get_tracker(name: str, config: dict, store: Optional[SectionedRecordStore] = None) -> Tracker:
    """Build the tracker called ``name`` for the data file in ``config``.

    ``config['sections']`` may rename the section a tracker writes to.
    """
    if name not in SCHEMAS:
        raise ValueError(
            f"Unknown tracker '{name}'. Expected one of: {', '.join(SCHEMAS)}."
        )
    schema = SCHEMAS[name]
    section = (config.get("sections") or {}).get(name)
    if section and section != schema.section:
        schema = TrackerSchema(schema.name, section, schema.category_label)
    store = store or SectionedRecordStore(config["data_file"])
    return Tracker(store, schema)


def monthly_summary(
    config: dict,
    month: str,
    store: Optional[SectionedRecordStore] = None,
) -> Dict[str, object]:
    """Totals of every tracker for ``month`` and the income/expense balance.

    ``store`` defaults to one over ``config['data_file']``.
    """
    store = store or SectionedRecordStore(config["data_file"])
    totals = {
        name: get_tracker(name, config, store).total_for_month(month)
        for name in SCHEMAS
    }
    return {
        "month": month,
        "income": totals["income"],
        "expense": totals["expense"],
        "transactions": totals["transactions"],
        "net": totals["income"] - totals["expense"],
    }
