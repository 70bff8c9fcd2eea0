from dataclasses import replace
import pytest
from domain.catalog import CalculationType, Catalog, CategorySetting, Product, UnitType
from domain.offer import Offer, OfferLine
from domain.profit import ProfitBreakdownEngine
from domain.recalculation import Recalculation


@pytest.fixture
def offer(engine, catalog, cockpit):
    draft = Offer(client_id="client-1", project_name="Zomerfestival", cockpit=cockpit)
    return engine.recalculate_offer(draft, catalog, Recalculation.fresh_create())


class TestProfitBreakdown:

    def test_standard_and_post_event_split(self, engine, catalog, offer):
        """Standard lines and post-event products are reported apart."""
        result = engine.breakdown(offer, catalog)

        # payment_tx 10, bar_staff 300, stage_setup 500
        assert result.standard_revenue == pytest.approx(810)
        assert result.standard_profit == pytest.approx(5 + 120 + 200)
        # card_fees 2.5% / 1% of €2000, cups 100 forecast at €1 (cost €0.40)
        assert result.post_calc_revenue == pytest.approx(50 + 100)
        assert result.post_calc_profit == pytest.approx(30 + 60)
        assert result.base_profit == pytest.approx(415)
        assert result.net_profit == pytest.approx(415)

    def test_budget_per_category(self, engine, catalog, offer):
        """Standard cost is collected per category as the budget."""
        result = engine.breakdown(offer, catalog)
        assert result.budget_by_category == pytest.approx({
            "transaction_processing": 5,
            "bar": 180,
            "crew": 300,
        })

    def test_staffel_multiplies_eligible_lines(self, engine, catalog, offer):
        """Staffel multiplies revenue and cost of has_staffel products."""
        offer = replace(offer, cockpit=offer.cockpit.with_staffel(2))
        result = engine.breakdown(offer, catalog)
        assert result.standard_revenue == pytest.approx(10 + 600 + 500)
        assert result.standard_profit == pytest.approx(5 + 240 + 200)

    def test_realization_only_counts_entered_actuals(self, engine, catalog, offer):
        """Only categories with an entered actual (0 included) are corrected."""
        offer = replace(offer, realization_costs={"bar": 150, "crew": None, "transaction_processing": 0})
        result = engine.breakdown(offer, catalog)
        # (180 - 150) + (5 - 0); crew has no actual yet
        assert result.realization_correction == pytest.approx(35)
        assert result.net_profit == pytest.approx(450)

    def test_additional_costs_and_other_revenue(self, engine, catalog, offer):
        """Additional cost buckets are subtracted, other revenue added."""
        offer = replace(offer, additional_costs={"Transport": 20, "Verzekering": 5}, other_revenue=10)
        result = engine.breakdown(offer, catalog)
        assert result.additional_costs == pytest.approx(25)
        assert result.other_revenue == pytest.approx(10)
        assert result.net_profit == pytest.approx(415 - 25 + 10)
        assert result.total_revenue == pytest.approx(810 + 150 + 10)

    def test_post_event_without_forecast_earns_nothing(self, engine, catalog, offer):
        """A per-unit post-event product without forecast adds nothing."""
        offer = replace(offer, post_calc_forecasts={"card_fees": 2000})
        result = engine.breakdown(offer, catalog)
        assert result.post_calc_revenue == pytest.approx(50)

    def test_missing_offer_gives_empty_breakdown(self, engine, catalog):
        """No offer, empty breakdown."""
        assert engine.breakdown(None, catalog).net_profit == 0.0

    def test_percentage_product_without_multiplier_uses_one(self, engine, cockpit):
        """A missing multiplier counts as 1 for percentage products."""
        catalog = Catalog(
            products=[Product(id="fees", name="Fees", category="visitor_fees", key_figure="expected_revenue",
                              unit_type=UnitType.PERCENTAGE_OF_REVENUE, percentage_fee=10)],
            category_settings=[CategorySetting(category="visitor_fees",
                                               calculation_type=CalculationType.POST_EVENT)],
        )
        offer = Offer(cockpit=cockpit, offer_lines=[OfferLine(product_id="fees")])
        assert engine.breakdown(offer, catalog).post_calc_revenue == pytest.approx(200)

    def test_transaction_processing_percentage_ignores_override(self, engine, cockpit):
        """The percentage base of transaction processing ignores the override."""
        catalog = Catalog(
            products=[Product(id="pin", name="PIN fees", category="transaction_processing",
                              key_figure="expected_revenue", key_figure_multiplier=1,
                              unit_type=UnitType.PERCENTAGE_OF_REVENUE, percentage_fee=1)],
            category_settings=[CategorySetting(category="transaction_processing",
                                               calculation_type=CalculationType.POST_EVENT)],
        )
        cockpit = cockpit.edit("total_visitors_override", 500)
        offer = Offer(cockpit=cockpit, offer_lines=[OfferLine(product_id="pin")])
        # 100 forecast visitors * €20, not 500 * €20
        assert engine.breakdown(offer, catalog).post_calc_revenue == pytest.approx(20)


class TestHardwareSummary:

    def test_quantities_grouped_by_hardware(self, engine, catalog):
        """Groups "none" and missing groups are left out."""
        lines = [
            OfferLine(product_id="bar_staff", quantity=6),
            OfferLine(product_id="stage_setup", quantity=5),  # group "none"
            OfferLine(product_id="payment_tx", quantity=100),  # no group
            OfferLine(product_id="ghost", quantity=1),
        ]
        assert engine.hardware_summary(lines, catalog) == {"crew": 6}

    def test_groups_accumulate(self, catalog):
        """Quantities of one group are summed."""
        products = [
            Product(id="a", name="Terminal", category="bar", hardware_group="pin"),
            Product(id="b", name="Mobile terminal", category="bar", hardware_group="pin"),
        ]
        lines = [OfferLine(product_id="a", quantity=3), OfferLine(product_id="b", quantity=4)]
        assert ProfitBreakdownEngine.hardware_summary(lines, Catalog(products=products)) == {"pin": 7}
