# domain/cockpit.py
import datetime
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_AVERAGE_TRANSACTION_VALUE = 13.0


class CockpitField(str, Enum):
    """Cockpit inputs whose edits can trigger a quantity recalculation."""
    EXPECTED_VISITORS_PER_SHOWDATE = "expected_visitors_per_showdate"
    BAR_METERS = "bar_meters"
    FOOD_SALES_POSITIONS = "food_sales_positions"
    EURO_SPEND_PER_PERSON = "euro_spend_per_person"
    SHOWDATES = "showdates"
    TOTAL_VISITORS_OVERRIDE = "total_visitors_override"
    AVERAGE_TRANSACTION_VALUE = "average_transaction_value"


def _as_number(value: Any) -> float:
    """Coerce operator input to a non-negative number (invalid input -> 0)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) and number > 0 else 0.0


def _as_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value)[:10])


@dataclass
class CockpitParameters:
    """Event-level inputs an operator edits in the offer cockpit."""
    showdates: List[datetime.date] = field(default_factory=list)
    expected_visitors_per_showdate: Dict[datetime.date, int] = field(default_factory=dict)
    bar_meters: float = 0.0
    food_sales_positions: float = 0.0
    euro_spend_per_person: float = 0.0
    total_visitors_override: Optional[int] = None
    average_transaction_value: float = DEFAULT_AVERAGE_TRANSACTION_VALUE
    staffel: float = 1.0

    @property
    def has_visitor_override(self) -> bool:
        return self.total_visitors_override is not None and self.total_visitors_override > 0

    @property
    def effective_staffel(self) -> float:
        return self.staffel if self.staffel and self.staffel > 0 else 1.0

    # =========================
    # EDIT OPERATIONS
    # =========================
    def edit(self, cockpit_field: CockpitField, value: Any) -> "CockpitParameters":
        """Return a copy with one cockpit field changed."""
        cockpit_field = CockpitField(cockpit_field)

        match cockpit_field:
            case CockpitField.SHOWDATES:
                return self.set_showdates(value or [])
            case CockpitField.EXPECTED_VISITORS_PER_SHOWDATE:
                visitors = {}
                for day, count in (value or {}).items():
                    day = _as_date(day)
                    if day in self.showdates:
                        visitors[day] = int(_as_number(count))
                return replace(self, expected_visitors_per_showdate=visitors)
            case CockpitField.TOTAL_VISITORS_OVERRIDE:
                override = int(_as_number(value)) if value is not None else None
                return replace(self, total_visitors_override=override or None)
            case _:
                return replace(self, **{cockpit_field.value: _as_number(value)})

    def set_showdates(self, dates: Iterable[Any]) -> "CockpitParameters":
        """Replace the showdates, dropping duplicates and pruning orphaned visitor counts."""
        unique: List[datetime.date] = []
        for day in dates:
            day = _as_date(day)
            if day not in unique:
                unique.append(day)
        visitors = {day: count for day, count in self.expected_visitors_per_showdate.items()
                    if day in unique}
        return replace(self, showdates=unique, expected_visitors_per_showdate=visitors)

    def set_visitors(self, day: Any, visitors: Any) -> "CockpitParameters":
        """Set the forecast for one showdate; dates that are not showdates are ignored."""
        day = _as_date(day)
        if day not in self.showdates:
            return self
        updated = dict(self.expected_visitors_per_showdate)
        updated[day] = int(_as_number(visitors))
        return replace(self, expected_visitors_per_showdate=updated)

    def with_staffel(self, staffel: Any) -> "CockpitParameters":
        value = _as_number(staffel)
        return replace(self, staffel=value if value > 0 else 1.0)
