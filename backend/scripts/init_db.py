#!/usr/bin/env python3
"""
Script para inicializar la base de datos del simulador de autobuses.

Uso:
    python scripts/init_db.py [--reset] [--seed]

Este script:
1. Verifica la conexión a la base de datos
2. Crea las tablas si no existen (--reset las borra antes)
3. Opcionalmente carga las rutas de ejemplo (--seed)
"""

import argparse
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db.database import DATABASE_URL, USE_DATABASE, create_tables, drop_tables, init_engine, is_database_available


def seed_routes(engine) -> int:
    from sqlalchemy.orm import sessionmaker

    from db import crud
    from services.seed_data import build_seed_routes

    routes = build_seed_routes()
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    with Session() as db:
        crud.replace_all_routes(db, routes)
    return len(routes)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Initialize the bus system database")
    parser.add_argument("--reset", action="store_true", help="drop all tables before creating them")
    parser.add_argument("--seed", action="store_true", help="replace all routes with the sample fleet")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("Bus System Database Initialization")
    print("=" * 60)

    # Check if database is enabled
    if not USE_DATABASE:
        print("\n⚠️  Database is disabled (USE_DATABASE=false)")
        print("   Set USE_DATABASE=true to enable database features.")
        return 0

    print(f"\n📊 Database URL: {DATABASE_URL.split('@')[-1]}")

    # Initialize engine
    print("\n🔄 Initializing database connection...")
    engine = init_engine()

    if engine is None:
        print("\n❌ Failed to connect to database!")
        print("\nPossible solutions:")
        print("  1. Check DATABASE_URL in your environment")
        print("  2. For SQLite, make sure the target directory is writable")
        return 1

    print("✅ Database connection successful!")

    # Create tables
    print("\n🔄 Creating tables...")
    try:
        if args.reset:
            drop_tables()
            print("🗑️  Existing tables dropped")
        create_tables()
        print("✅ Tables created successfully!")
    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        return 1

    if args.seed:
        print("\n🔄 Seeding sample routes...")
        try:
            count = seed_routes(engine)
            print(f"✅ Seeded {count} routes")
        except Exception as e:
            print(f"❌ Error seeding routes: {e}")
            return 1

    # Verify tables exist
    print("\n🔄 Verifying database...")
    if is_database_available():
        print("✅ Database is ready!")
        print("\n📋 Available tables:")
        from sqlalchemy import inspect
        inspector = inspect(engine)
        for table_name in inspector.get_table_names():
            print(f"   - {table_name}")
    else:
        print("❌ Database verification failed!")
        return 1

    print("\n" + "=" * 60)
    print("Database initialization complete!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
