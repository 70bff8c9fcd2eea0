#!/usr/bin/env python3
# main.py
"""
Command line entry point.

Usage:
  python main.py recalculate --catalog catalog.json --offer offer.json
  python main.py recalculate --catalog catalog.json --offer offer.json --field bar_meters --value 24 --output out.json
  python main.py edit --catalog catalog.json --offers-dir offers/ --offer-id <id> --field bar_meters --value 24
  python main.py batch --catalog catalog.json --rows rows.json --offers-dir offers/
  python main.py report --catalog catalog.json --offers-dir offers/ --output report.xlsx
"""

import argparse
import json
import sys
from core.app_initializer import create_autosave_scheduler, initialize_app
from core.batch_offer_creator import BatchOfferCreator
from core.offer_editor import OfferEditorSession
from core.profit_report import ProfitReportService
from domain.cockpit import CockpitField
from domain.recalculation import Recalculation
from infrastructure.configuration import ConfigurationService
from infrastructure.logging_service import close_all_module_loggers
from infrastructure.offer_store import JsonOfferStore
from infrastructure.persistence import PersistenceService


def _parse_value(raw: str):
    """Cockpit values come in as JSON when possible (lists, maps, null), else as text."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _print_totals(offer):
    print(f"Subtotal excl. BTW: {offer.subtotal_excl_btw:.2f}")
    print(f"BTW:                {offer.btw_amount:.2f}")
    print(f"Total incl. BTW:    {offer.total_incl_btw:.2f}")


def _store(args, config: ConfigurationService) -> JsonOfferStore:
    return JsonOfferStore(args.offers_dir or config.get_offers_root_folder())


def cmd_recalculate(args, engine) -> int:
    catalog = PersistenceService.load_catalog(args.catalog)
    offer = PersistenceService.load_offer(args.offer)

    if args.field:
        field = CockpitField(args.field)
        offer.cockpit = offer.cockpit.edit(field, _parse_value(args.value))
        recalculation = Recalculation.field_edit(field)
    elif offer.is_new:
        recalculation = Recalculation.fresh_create()
    else:
        recalculation = Recalculation.load_existing()

    offer = engine.recalculate_offer(offer, catalog, recalculation)
    _print_totals(offer)

    if args.output:
        PersistenceService.save_offer(offer, args.output)
        print(f"Offer written to {args.output}")
    return 0


def cmd_edit(args, engine, config: ConfigurationService) -> int:
    """Apply one cockpit edit to a stored offer; the autosave writes it back."""
    catalog = PersistenceService.load_catalog(args.catalog)
    session = OfferEditorSession(engine, catalog, _store(args, config), create_autosave_scheduler(config),
                                 config.get_default_average_transaction_value())
    session.open_existing(args.offer_id)
    offer = session.edit_cockpit(args.field, _parse_value(args.value))
    session.close()

    _print_totals(offer)
    return 0


def cmd_batch(args, engine, config: ConfigurationService) -> int:
    catalog = PersistenceService.load_catalog(args.catalog)
    with open(args.rows, 'r', encoding='utf-8') as f:
        rows = json.load(f)

    creator = BatchOfferCreator(engine, catalog, _store(args, config),
                                config.get_default_average_transaction_value())
    result = creator.create_offers(rows)
    for offer in result.created:
        print(f"{offer.offer_number:<24} {offer.project_name:<30} {offer.total_incl_btw:>12.2f}")
    if result.skipped:
        print(f"Skipped rows (client and project name required): {result.skipped}")
    return 0


def cmd_report(args, engine, config: ConfigurationService) -> int:
    catalog = PersistenceService.load_catalog(args.catalog)
    service = ProfitReportService(engine, catalog, config.get_additional_cost_buckets())

    offers = _store(args, config).list()
    rows = service.rows(offers)
    for row in rows:
        print(f"{row.offer.offer_number:<24} {row.offer.project_name:<30} {row.breakdown.net_profit:>12.2f}")
    print(f"Net profit total: {service.portfolio_totals(rows).net_profit:.2f}")

    if args.output:
        service.export(offers, args.output)
        print(f"Report written to {args.output}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Festival offer pricing")
    parser.add_argument("--config", help="Path to app_config.json")
    sub = parser.add_subparsers(dest="command", required=True)
    fields = [f.value for f in CockpitField]

    p_recalc = sub.add_parser("recalculate", help="Recalculate an offer file from its cockpit")
    p_recalc.add_argument("--catalog", required=True)
    p_recalc.add_argument("--offer", required=True)
    p_recalc.add_argument("--field", choices=fields)
    p_recalc.add_argument("--value", default="null")
    p_recalc.add_argument("--output")

    p_edit = sub.add_parser("edit", help="Edit one cockpit field of a stored offer")
    p_edit.add_argument("--catalog", required=True)
    p_edit.add_argument("--offers-dir")
    p_edit.add_argument("--offer-id", required=True)
    p_edit.add_argument("--field", required=True, choices=fields)
    p_edit.add_argument("--value", default="null")

    p_batch = sub.add_parser("batch", help="Create draft offers from a JSON list of rows")
    p_batch.add_argument("--catalog", required=True)
    p_batch.add_argument("--rows", required=True)
    p_batch.add_argument("--offers-dir")

    p_report = sub.add_parser("report", help="Profit report over stored offers")
    p_report.add_argument("--catalog", required=True)
    p_report.add_argument("--offers-dir")
    p_report.add_argument("--output")

    args = parser.parse_args(argv)
    config = ConfigurationService(args.config) if args.config else ConfigurationService.get_instance()
    engine = initialize_app(config)

    try:
        match args.command:
            case "recalculate":
                return cmd_recalculate(args, engine)
            case "edit":
                return cmd_edit(args, engine, config)
            case "batch":
                return cmd_batch(args, engine, config)
            case _:
                return cmd_report(args, engine, config)
    finally:
        close_all_module_loggers()


if __name__ == "__main__":
    sys.exit(main())
