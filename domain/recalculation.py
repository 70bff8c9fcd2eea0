# domain/recalculation.py
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional
from .catalog import KeyFigure, has_key_figure
from .cockpit import CockpitField


class RecalculationMode(Enum):
    FRESH_CREATE = "fresh_create"
    FIELD_EDIT = "field_edit"
    LOAD_EXISTING = "load_existing"


@dataclass(frozen=True)
class Recalculation:
    """Why a derivation pass runs: new offer, one cockpit edit, or loading a saved offer."""
    mode: RecalculationMode
    changed_field: Optional[CockpitField] = None

    @classmethod
    def fresh_create(cls) -> "Recalculation":
        return cls(RecalculationMode.FRESH_CREATE)

    @classmethod
    def field_edit(cls, changed_field) -> "Recalculation":
        return cls(RecalculationMode.FIELD_EDIT, CockpitField(changed_field))

    @classmethod
    def load_existing(cls) -> "Recalculation":
        return cls(RecalculationMode.LOAD_EXISTING)

    @property
    def skips_recalculation(self) -> bool:
        return self.mode == RecalculationMode.LOAD_EXISTING


AFFECTED_KEY_FIGURES: Dict[CockpitField, FrozenSet[str]] = {
    CockpitField.EXPECTED_VISITORS_PER_SHOWDATE: frozenset({
        KeyFigure.TOTAL_VISITORS.value, KeyFigure.EXPECTED_REVENUE.value}),
    CockpitField.BAR_METERS: frozenset({KeyFigure.BAR_METERS.value}),
    CockpitField.FOOD_SALES_POSITIONS: frozenset({KeyFigure.FOOD_SALES_POSITIONS.value}),
    CockpitField.EURO_SPEND_PER_PERSON: frozenset({
        KeyFigure.EURO_SPEND_PER_PERSON.value, KeyFigure.EXPECTED_REVENUE.value}),
    CockpitField.SHOWDATES: frozenset({
        KeyFigure.NUMBER_OF_SHOWDATES.value, KeyFigure.TOTAL_VISITORS.value,
        KeyFigure.EXPECTED_REVENUE.value}),
    CockpitField.TOTAL_VISITORS_OVERRIDE: frozenset({KeyFigure.TOTAL_VISITORS.value}),
    CockpitField.AVERAGE_TRANSACTION_VALUE: frozenset({KeyFigure.AVERAGE_TRANSACTION_VALUE.value}),
}


class RecalculationPolicy:
    """Decides which key-figure driven lines a derivation pass may overwrite."""

    def affected_key_figures(self, changed_field: Optional[CockpitField]) -> FrozenSet[str]:
        if changed_field is None:
            return frozenset()
        return AFFECTED_KEY_FIGURES.get(CockpitField(changed_field), frozenset())

    def should_recalculate(self, recalculation: Recalculation, key_figure: Optional[str],
                           is_ticketing: bool = False) -> bool:
        match recalculation.mode:
            case RecalculationMode.LOAD_EXISTING:
                # Loading a saved offer must never rewrite its stored quantities
                return False
            case RecalculationMode.FRESH_CREATE:
                return has_key_figure(key_figure)
            case RecalculationMode.FIELD_EDIT:
                if not has_key_figure(key_figure):
                    return False
                # The override switches ticketing fees between zero and derived
                if is_ticketing and recalculation.changed_field == CockpitField.TOTAL_VISITORS_OVERRIDE:
                    return True
                return key_figure in self.affected_key_figures(recalculation.changed_field)
        return False
