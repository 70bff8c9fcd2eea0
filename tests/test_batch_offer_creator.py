import pytest
from core.batch_offer_creator import BatchOfferCreator
from infrastructure.offer_store import JsonOfferStore
from tests.builders import DAY_1, DAY_2

TIMESTAMP = 1767225600

FESTIVAL_ROW = {
    "client_id": "client-1",
    "project_name": "  Zomerfestival ",
    "project_location": "Utrecht",
    "showdates": ["2026-07-10", "2026-07-11"],
    "expected_visitors_per_showdate": {"2026-07-10": 60, "2026-07-11": 40},
    "bar_meters": 12,
    "euro_spend_per_person": 20,
}


@pytest.fixture
def store(tmp_path):
    return JsonOfferStore(str(tmp_path))


@pytest.fixture
def creator(engine, catalog, store):
    return BatchOfferCreator(engine, catalog, store)


class TestBatchOfferCreator:

    def test_build_offer_prices_without_saving(self, creator, store):
        """A row is priced with a fresh pass but not stored."""
        offer = creator.build_offer(FESTIVAL_ROW, 0, TIMESTAMP)

        assert offer.is_new
        assert offer.offer_number == f"DRAFT-{TIMESTAMP}-0"
        assert offer.project_name == "Zomerfestival"
        assert offer.cockpit.showdates == [DAY_1, DAY_2]
        assert offer.line_for("bar_staff").quantity == 6
        assert offer.subtotal_excl_btw == 810.00
        assert store.list() == []

    def test_rows_without_client_or_project_are_skipped(self, creator, store):
        """Rows that cannot be saved are reported as skipped."""
        rows = [
            FESTIVAL_ROW,
            {"client_id": "client-2", "project_name": "   "},
            {"project_name": "Winterfestival"},
            dict(FESTIVAL_ROW, client_id="client-3", staffel=2),
        ]
        result = creator.create_offers(rows, TIMESTAMP)

        assert result.skipped == [1, 2]
        assert [o.offer_number for o in result.created] == [f"DRAFT-{TIMESTAMP}-0", f"DRAFT-{TIMESTAMP}-3"]
        assert all(o.id for o in result.created)
        assert len(store.list()) == 2

    def test_row_staffel_and_discount(self, creator):
        """Staffel and discount from the row reach the totals."""
        row = dict(FESTIVAL_ROW, staffel=2, total_discount_percentage=10)
        offer = creator.build_offer(row, 5, TIMESTAMP)

        assert offer.cockpit.staffel == 2
        assert offer.subtotal_excl_btw == 1110.00
        assert offer.total_incl_btw == 1208.79

    def test_default_transaction_value_applies(self, engine, catalog, store):
        """The configured average transaction value is the default."""
        creator = BatchOfferCreator(engine, catalog, store, default_average_transaction_value=15)
        offer = creator.build_offer({"client_id": "c", "project_name": "p"}, 0, TIMESTAMP)
        assert offer.cockpit.average_transaction_value == 15
