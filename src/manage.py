"""Storefront management CLI.

Creates and drops the database schema, and runs the Pix reconciliation
sweep on demand (suitable for cron).

Usage:
    python src/manage.py setup-db    # Create all tables
    python src/manage.py drop-db     # Drop all tables
    python src/manage.py sweep-pix   # Reconcile pending Pix orders once
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront
    from storefront.utils.logging import configure_logging

    configure_logging()
    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def sweep_pix():
    from storefront.sweeper.sweep import sweep_pending_pix_orders

    domain = _domain()
    with domain.domain_context():
        report = sweep_pending_pix_orders()

    print(
        f"Checked {report.checked} pending Pix orders: "
        f"{report.advanced} advanced, {report.already_confirmed} already confirmed, "
        f"{report.unpaid} unpaid, {report.failed} failed."
    )
    return report


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("sweep-pix", help="Reconcile pending Pix orders with the gateway")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "sweep-pix":
        report = sweep_pix()
        if report.failed:
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
