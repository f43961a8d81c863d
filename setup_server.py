#!/usr/bin/env python3
"""
BidHub Server - Setup Script

This script initializes the BidHub server for deployment:
1. Creates the SQLite database with schema
2. Populates default platform settings
3. Creates the super admin (first run)
4. Optionally assigns an admin role to another account

Usage:
    python setup_server.py
    python setup_server.py --admin-email ops@example.com --admin-role moderator
"""

import argparse
import sys
from pathlib import Path

# Ensure we can import from the same directory
sys.path.insert(0, str(Path(__file__).parent))

from managers.database_manager import DatabaseManager, DEFAULT_ADMIN_EMAIL
from rbac import DEFAULT_ROLE_PERMISSIONS


def print_header():
    """Print script header"""
    print("=" * 70)
    print("BidHub Server - Setup Script")
    print("=" * 70)
    print()


def print_section(title):
    """Print section header"""
    print()
    print("-" * 70)
    print(f"  {title}")
    print("-" * 70)


def initialize_database(db_path: Path, admin_email: str):
    """
    Initialize the SQLite database with schema and default data

    Returns:
        str or None: Super admin password if created, None otherwise
    """
    print_section("Database Initialization")

    if db_path.exists():
        print(f"[OK] Database file found at: {db_path.absolute()}")
        print("  Existing database will be updated with any missing tables/settings.")
    else:
        print(f"-> Creating new database at: {db_path.absolute()}")

    print()

    try:
        db_manager = DatabaseManager(str(db_path))
        admin_password = db_manager.InitializeDatabase(admin_email)

        print("[OK] Database initialization complete!")

        return admin_password

    except Exception as e:
        print(f"[ERROR] Database initialization failed: {str(e)}")
        raise


def assign_admin_role(db_path: Path, email: str, role: str):
    """
    Create an admin account, or give an existing account an admin role

    Returns:
        str or None: Generated password if a new account was created
    """
    print_section("Admin Role Assignment")

    db_manager = DatabaseManager(str(db_path))
    session = db_manager.GetSession()
    password = db_manager.GenerateRandomPassword()

    try:
        user, created = db_manager.CreateAdminUser(session, email, password, role)
        session.commit()

        print(f"[OK] '{email}' has admin role '{role}'")
        return password if created else None

    except Exception as e:
        session.rollback()
        print(f"[ERROR] Could not assign admin role: {str(e)}")
        raise
    finally:
        session.close()


def print_admin_credentials(email, password):
    """
    Print admin credentials prominently

    Args:
        email: Admin login email
        password: Generated admin password
    """
    print()
    print("!" * 70)
    print("!  IMPORTANT: SAVE THESE CREDENTIALS - PASSWORD SHOWN ONLY ONCE!  !")
    print("!" * 70)
    print()
    print(f"  Admin Email:    {email}")
    print(f"  Admin Password: {password}")
    print()
    print("  -> Log in at /admin/login")


def main():
    parser = argparse.ArgumentParser(description="Initialize the BidHub server database")
    parser.add_argument("--db-path", default="database/bidhub.db", help="SQLite database file")
    parser.add_argument("--admin-email", default=None, help="Account to create or promote to admin")
    parser.add_argument(
        "--admin-role",
        default="super_admin",
        choices=sorted(DEFAULT_ROLE_PERMISSIONS.keys()),
        help="Admin role for --admin-email"
    )
    args = parser.parse_args()

    print_header()

    db_path = Path(args.db_path)
    super_admin_password = initialize_database(db_path, DEFAULT_ADMIN_EMAIL)
    if super_admin_password:
        print_admin_credentials(DEFAULT_ADMIN_EMAIL, super_admin_password)

    if args.admin_email:
        password = assign_admin_role(db_path, args.admin_email, args.admin_role)
        if password:
            print_admin_credentials(args.admin_email, password)

    print_section("Next Steps")
    print()
    print("  Set BIDHUB_SESSION_SECRET so sessions survive restarts, then run:")
    print()
    print("    python server.py")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
