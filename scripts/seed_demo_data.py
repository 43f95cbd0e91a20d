#!/usr/bin/env python
"""
Seed Demo Data

Creates services, vendors (with services and country coverage), one client
and one active project so the scheduler has something to match.

Usage:
    python scripts/seed_demo_data.py

Idempotent: skips services, vendors and clients that already exist (by name).
"""

from decimal import Decimal

from app.database import init_db
from app.models import Client, Project, ProjectStatus, Service, Vendor, VendorCountry

SERVICES = [
    'Legal Services',
    'Accounting Services',
    'HR Services',
    'IT Services',
    'Marketing Services',
    'Financial Services',
]

VENDORS = [
    {
        'name': 'Legal Solutions Ltd',
        'rating': Decimal('4.50'),
        'response_sla_hours': 24,
        'services': ['Legal Services'],
        'countries': ['US', 'UK', 'CA'],
    },
    {
        'name': 'Global Accounting Partners',
        'rating': Decimal('4.20'),
        'response_sla_hours': 48,
        'services': ['Accounting Services', 'Financial Services'],
        'countries': ['US', 'UK', 'DE', 'FR'],
    },
    {
        'name': 'Tech Innovators Inc',
        'rating': Decimal('4.80'),
        'response_sla_hours': 12,
        'services': ['IT Services'],
        'countries': ['US', 'IN', 'SG'],
    },
    {
        'name': 'HR Excellence Group',
        'rating': Decimal('4.00'),
        'response_sla_hours': 36,
        'services': ['HR Services'],
        'countries': ['US', 'UK', 'AU'],
    },
]

DEMO_CLIENT = {
    'company_name': 'Example Corp',
    'contact_email': 'contact@example.com',
}

DEMO_PROJECT = {
    'country': 'US',
    'budget': Decimal('250000.00'),
    'status': ProjectStatus.ACTIVE,
    'services': ['Legal Services', 'IT Services', 'HR Services'],
}


def seed_demo_data():
    """
    Seed the demo dataset. Commits once at the end.
    """
    init_db()
    from app.database import SessionLocal

    if SessionLocal is None:
        raise SystemExit("DATABASE_URL not configured")

    db = SessionLocal()

    try:
        services = {s.name: s for s in db.query(Service).all()}
        for name in SERVICES:
            if name not in services:
                services[name] = Service(name=name)
                db.add(services[name])
                print(f"✅ Seeded service {name}")

        for vendor_data in VENDORS:
            if db.query(Vendor).filter(Vendor.name == vendor_data['name']).first():
                print(f"⏭️  Skipping vendor {vendor_data['name']} - already exists")
                continue

            vendor = Vendor(
                name=vendor_data['name'],
                rating=vendor_data['rating'],
                response_sla_hours=vendor_data['response_sla_hours'],
            )
            vendor.services = [services[name] for name in vendor_data['services']]
            vendor.countries = [VendorCountry(country=code) for code in vendor_data['countries']]
            db.add(vendor)
            print(f"✅ Seeded vendor {vendor.name}")

        client = db.query(Client).filter(Client.company_name == DEMO_CLIENT['company_name']).first()
        if client:
            print(f"⏭️  Skipping client {client.company_name} - already exists")
        else:
            client = Client(**DEMO_CLIENT)
            db.add(client)

            project = Project(
                client=client,
                country=DEMO_PROJECT['country'],
                budget=DEMO_PROJECT['budget'],
                status=DEMO_PROJECT['status'],
            )
            project.required_services = [services[name] for name in DEMO_PROJECT['services']]
            db.add(project)
            print(f"✅ Seeded client {client.company_name} with one active project")

        db.commit()
        print("\nDemo data seeding complete!")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding demo data: {e}")
        raise
    finally:
        db.close()


if __name__ == '__main__':
    seed_demo_data()
