#!/usr/bin/env python3
"""
Seed script to load sample pharmacy rows into the hosted data API.
Uses the credentials stored by the connection setup (or the environment).
Usage: python seed_pharmacy_tables.py
"""

import sys
from pathlib import Path

# Add backend directory to path
backend_dir = Path(__file__).parent / "backend"
sys.path.insert(0, str(backend_dir))

from pharmadash.core.config import settings
from pharmadash.db.init_db import init_db
from pharmadash.gateway.client import DataGateway, GatewayError
from pharmadash.services.credential_store import CredentialStore, GatewayCredentials


SAMPLE_ROWS = {
    "inventory": ("drug_name", [
        {"drug_name": "Paracetamol", "company": "MediPharma", "storage_date": "2023-09-15", "expiry_date": "2025-09-15", "retail_price": 5.99, "current_quantity": 150},
        {"drug_name": "Ibuprofen", "company": "HealthCure", "storage_date": "2023-10-20", "expiry_date": "2025-10-20", "retail_price": 4.50, "current_quantity": 200},
        {"drug_name": "Amoxicillin", "company": "BioMed", "storage_date": "2023-08-10", "expiry_date": "2024-08-10", "retail_price": 12.99, "current_quantity": 18},
        {"drug_name": "Cetirizine", "company": "AllerCare", "storage_date": "2023-11-05", "expiry_date": "2025-11-05", "retail_price": 7.25, "current_quantity": 120},
        {"drug_name": "Omeprazole", "company": "GastroHealth", "storage_date": "2023-07-25", "expiry_date": "2024-07-25", "retail_price": 9.99, "current_quantity": 9},
        {"drug_name": "Ciprofloxacin", "company": "BioMed", "storage_date": "2023-06-30", "expiry_date": "2024-06-30", "retail_price": 14.50, "current_quantity": 60},
    ]),
    "restocking": ("drug_name", [
        {"drug_name": "Amoxicillin", "quantity_needed": 100, "price_per_unit": 9.50, "supplier": "BioMed Distributors"},
        {"drug_name": "Omeprazole", "quantity_needed": 80, "price_per_unit": 6.75, "supplier": "GastroHealth Supply"},
    ]),
    "employees": ("name", [
        {"name": "John Doe", "shift": "Morning", "salary": 3500},
        {"name": "Jane Smith", "shift": "Evening", "salary": 3200},
        {"name": "Michael Johnson", "shift": "Night", "salary": 3800},
        {"name": "Emily Brown", "shift": "Morning", "salary": 3400},
        {"name": "William Davis", "shift": "Evening", "salary": 3100},
    ]),
}


def seed_tables():
    """Insert sample rows that are not there yet"""

    # Ensure local storage exists
    init_db()

    credentials = CredentialStore().load()
    if credentials is None:
        credentials = GatewayCredentials(settings.GATEWAY_URL, settings.GATEWAY_KEY)
    if not credentials.is_complete:
        print("❌ No credentials found. Connect through the dashboard or set "
              "PHARMADASH_GATEWAY_URL / PHARMADASH_GATEWAY_KEY, then re-run.")
        return False

    gateway = DataGateway(credentials.endpoint_url, credentials.access_key)
    added_count = 0
    try:
        for table, (key_field, rows) in SAMPLE_ROWS.items():
            try:
                existing = {r.get(key_field) for r in gateway.select(table, columns=key_field)}
            except GatewayError as e:
                if e.is_schema_missing:
                    print(f"⚠️  Table '{table}' does not exist yet, skipping ({e.message})")
                    continue
                raise

            for row in rows:
                if row[key_field] in existing:
                    print(f"⊙ {table}: {row[key_field]} already exists, skipping")
                    continue
                gateway.insert(table, row)
                added_count += 1
                print(f"✓ {table}: added {row[key_field]}")

        print(f"\n✅ Successfully seeded {added_count} rows!")
        return True

    except GatewayError as e:
        print(f"\n❌ Error seeding data ({e.code}): {e.message}")
        return False
    finally:
        gateway.close()


if __name__ == "__main__":
    print("💊 Pharmacy Dashboard - Sample Data Seeding\n")
    sys.exit(0 if seed_tables() else 1)
