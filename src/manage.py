"""Bookshop management CLI.

Usage:
    python src/manage.py setup-db     # Create all tables
    python src/manage.py drop-db      # Drop all tables
    python src/manage.py seed-roles   # Create the USER and ADMIN roles
"""

import argparse
import sys


def setup_database():
    from bookshop.domain import bookshop
    from bookshop.utils.db import setup_db

    print("Initializing bookshop domain...")
    bookshop.init()
    print("Creating bookshop database schema...")
    setup_db(bookshop)
    print("Done.")


def drop_database():
    from bookshop.domain import bookshop
    from bookshop.utils.db import drop_db

    print("Initializing bookshop domain...")
    bookshop.init()
    print("Dropping bookshop database schema...")
    drop_db(bookshop)
    print("Done.")


def seed_roles():
    from bookshop.domain import bookshop
    from bookshop.identity.service import UserService

    bookshop.init()
    with bookshop.domain_context():
        created = UserService().seed_default_roles()

    if created:
        print(f"Created roles: {', '.join(created)}")
    else:
        print("Default roles already present.")


def main():
    parser = argparse.ArgumentParser(description="Bookshop management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-roles", help="Create the default USER and ADMIN roles")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-roles":
        seed_roles()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
