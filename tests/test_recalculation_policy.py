import pytest
from domain.cockpit import CockpitField
from domain.recalculation import Recalculation, RecalculationMode, RecalculationPolicy


@pytest.fixture
def policy():
    return RecalculationPolicy()


class TestRecalculationPolicy:

    def test_load_existing_never_recalculates(self, policy):
        """Loading a stored offer never recalculates."""
        load = Recalculation.load_existing()
        assert load.skips_recalculation
        for key_figure in ("total_visitors", "bar_meters", "expected_revenue"):
            assert not policy.should_recalculate(load, key_figure)
        assert not policy.should_recalculate(load, "total_visitors", is_ticketing=True)

    def test_fresh_create_recalculates_every_key_figure_line(self, policy):
        """A new offer recalculates every key-figure line."""
        fresh = Recalculation.fresh_create()
        assert policy.should_recalculate(fresh, "bar_meters")
        assert policy.should_recalculate(fresh, "average_transaction_value")
        assert not policy.should_recalculate(fresh, "none")

    @pytest.mark.parametrize("field, affected", [
        (CockpitField.EXPECTED_VISITORS_PER_SHOWDATE, {"total_visitors", "expected_revenue"}),
        (CockpitField.BAR_METERS, {"bar_meters"}),
        (CockpitField.EURO_SPEND_PER_PERSON, {"euro_spend_per_person", "expected_revenue"}),
        (CockpitField.SHOWDATES, {"number_of_showdates", "total_visitors", "expected_revenue"}),
        (CockpitField.TOTAL_VISITORS_OVERRIDE, {"total_visitors"}),
    ])
    def test_field_edit_affects_only_mapped_key_figures(self, policy, field, affected):
        """A field edit reaches its mapped key figures only."""
        assert policy.affected_key_figures(field) == affected
        edit = Recalculation.field_edit(field)
        assert policy.should_recalculate(edit, sorted(affected)[0])
        assert not policy.should_recalculate(edit, "food_sales_positions")

    def test_ticketing_always_eligible_on_override_change(self, policy):
        """Ticketing is eligible whenever the override changes."""
        edit = Recalculation.field_edit("total_visitors_override")
        assert edit.mode == RecalculationMode.FIELD_EDIT
        assert not policy.should_recalculate(edit, "bar_meters")
        assert policy.should_recalculate(edit, "bar_meters", is_ticketing=True)

    def test_ticketing_without_key_figure_stays_manual(self, policy):
        """A ticketing product without key figure stays manual."""
        edit = Recalculation.field_edit(CockpitField.TOTAL_VISITORS_OVERRIDE)
        assert not policy.should_recalculate(edit, "none", is_ticketing=True)

    def test_unknown_field_token_is_rejected(self):
        """Staffel is not a recalculation trigger."""
        with pytest.raises(ValueError):
            Recalculation.field_edit("staffel")
