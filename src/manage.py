"""Storefront management CLI.

Usage:
    python src/manage.py setup-db               # Create all tables
    python src/manage.py drop-db                # Drop all tables
    python src/manage.py release-reservations   # Return stock held by expired reservations
    python src/manage.py seed-settings --tax-rate 8.5 --zone "Inside city:6000"

``release-reservations`` is meant to be run on a schedule (cron, K8s
CronJob); it is safe to run concurrently with checkouts.
"""

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def _storefront():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_databases():
    from storefront.utils.db import setup_db

    domain = _storefront()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_databases():
    from storefront.utils.db import drop_db

    domain = _storefront()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def release_reservations():
    from storefront.inventory.expiry import release_expired_reservations

    domain = _storefront()
    with domain.domain_context():
        released = release_expired_reservations()
    print(f"Released {released} expired reservation(s).")


def seed_settings(tax_rate, zones):
    """Store the tax rate and add shipping zones given as ``name:charge_cents``."""
    from protean.exceptions import ObjectNotFoundError

    from storefront.checkout.settings import GENERAL_SETTINGS_ID, ShippingZone, StoreSettings

    domain = _storefront()
    with domain.domain_context():
        repo = domain.repository_for(StoreSettings)
        try:
            settings = repo.get(GENERAL_SETTINGS_ID)
            settings.tax_rate = tax_rate
        except ObjectNotFoundError:
            settings = StoreSettings(settings_id=GENERAL_SETTINGS_ID, tax_rate=tax_rate)
        repo.add(settings)

        for entry in zones or []:
            name, _, charge = entry.rpartition(":")
            domain.repository_for(ShippingZone).add(ShippingZone(name=name, charge_cents=int(charge)))
            print(f"  zone {name}: {charge} cents")
    print(f"Tax rate set to {tax_rate}%.")


def main():
    from storefront.utils.logging import configure_logging

    configure_logging()

    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("release-reservations", help="Release expired stock reservations")

    seed_parser = subparsers.add_parser("seed-settings", help="Store tax rate and shipping zones")
    seed_parser.add_argument("--tax-rate", type=float, default=0.0, help="Tax percentage (default: 0)")
    seed_parser.add_argument(
        "--zone",
        action="append",
        help="Shipping zone as NAME:CHARGE_CENTS (repeatable)",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    elif args.command == "release-reservations":
        release_reservations()
    elif args.command == "seed-settings":
        seed_settings(args.tax_rate, args.zone)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
