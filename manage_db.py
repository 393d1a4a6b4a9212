#!/usr/bin/env python
"""
Database Setup and Migration Script
Helps with initial setup, migrations and seeding the default administrator
"""
import os
import re
import sys

from flask_migrate import upgrade
from helpdesk import create_app, db

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'migrations')


def create_database_if_not_exists():
    """Create database if it doesn't exist (for MySQL/MariaDB)"""
    from sqlalchemy import create_engine, text
    from sqlalchemy.exc import OperationalError

    database_url = os.getenv('DATABASE_URL', '')

    if 'mysql' in database_url or 'mariadb' in database_url:
        match = re.search(r'/([^/?]+)(\?|$)', database_url)
        if match:
            db_name = match.group(1)
            base_url = database_url.replace(f'/{db_name}', '/mysql')

            try:
                engine = create_engine(base_url)
                with engine.connect() as conn:
                    conn.execute(text(
                        f"CREATE DATABASE IF NOT EXISTS {db_name} CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"))
                    print(f"✓ Database '{db_name}' ready")
                engine.dispose()
            except OperationalError as e:
                print(f"✗ Error creating database: {e}")
                return False
    return True


def _revisions():
    """(current, head) alembic revisions of the configured database"""
    from alembic.config import Config
    from alembic.runtime.migration import MigrationContext
    from alembic.script import ScriptDirectory

    alembic_cfg = Config(os.path.join(MIGRATIONS_DIR, 'alembic.ini'))
    alembic_cfg.set_main_option('script_location', MIGRATIONS_DIR)
    script = ScriptDirectory.from_config(alembic_cfg)

    with db.engine.connect() as connection:
        current_rev = MigrationContext.configure(connection).get_current_revision()
    return current_rev, script.get_current_head()


def init_db():
    """Initialize database with migrations and seed the defaults"""
    app = create_app()

    print("=" * 60)
    print("Database Initialization")
    print("=" * 60)

    with app.app_context():
        print("\n1. Checking database connection...")
        try:
            db.engine.connect().close()
            print("   ✓ Database connection successful")
        except Exception as e:
            print(f"   ✗ Database connection failed: {e}")
            return False

        print("\n2. Applying migrations...")
        current_rev, head_rev = _revisions()
        if current_rev == head_rev:
            print("   ✓ Database is up to date")
        else:
            print(f"   → {current_rev or 'empty'} -> {head_rev}")
            upgrade(directory=MIGRATIONS_DIR)
            print("   ✓ Database upgraded successfully")

        print("\n3. Seeding default roles and administrator...")
        from helpdesk.seeds import seed_defaults
        admin = seed_defaults()
        print(f"   ✓ Administrator: {admin.email}")

    print("\n" + "=" * 60)
    return True


def show_status():
    """Show current database status"""
    app = create_app()

    print("=" * 60)
    print("Database Status")
    print("=" * 60)

    with app.app_context():
        print(f"\nDatabase URL: {db.engine.url.render_as_string(hide_password=True)}")
        print(f"Dialect: {db.engine.dialect.name}")

        current_rev, head_rev = _revisions()
        print(f"\nCurrent Revision: {current_rev or 'None'}")
        print(f"Head Revision: {head_rev}")
        if current_rev == head_rev:
            print("\n✓ Database is up to date")
        else:
            print("\n⚠ Pending migrations found!")
            print("  Run: flask db upgrade")

        from helpdesk.services.licensing.manager import check_license
        status = check_license()
        print(f"\nLicense: {status.message}")
        print(f"Active users: {status.current_users} / {status.max_users or '-'}")

    print("\n" + "=" * 60)


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Database management script')
    parser.add_argument('command', choices=['init', 'status', 'create-db'],
                        help='Command to execute')

    args = parser.parse_args()

    if args.command == 'create-db':
        print("Creating database...")
        if create_database_if_not_exists():
            print("✓ Done")
        else:
            print("✗ Failed")
            sys.exit(1)
    elif args.command == 'init':
        if not init_db():
            sys.exit(1)
    elif args.command == 'status':
        show_status()
