#!/usr/bin/env python3

from datetime import date, timedelta
from decimal import Decimal

from schooltrips.database import engine, SessionLocal, Base
from schooltrips.models import User, Trip, PricingRule, Booking, AvailabilitySlot
from schooltrips.auth.utils import get_password_hash

def create_seed_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("Creating seed data for the school trip platform...")

        # Clear existing data (in reverse dependency order)
        print("Clearing existing data...")
        db.query(Booking).delete()
        db.query(AvailabilitySlot).delete()
        db.query(PricingRule).delete()
        db.query(Trip).delete()
        db.query(User).delete()

        # 1. Create Users
        print("Creating users...")
        users = [
            User(name="Platform Admin", email="admin@schooltrips.io",
                 password=get_password_hash("Admin123!"), role="admin"),
            User(name="Sarah Johnson", email="sarah@greenviewschool.org",
                 password=get_password_hash("Client123!"), role="client",
                 school="Greenview High School", phone="+44 7700 900001"),
            User(name="Mark Thompson", email="mark@stpeterscollege.edu",
                 password=get_password_hash("Client123!"), role="client",
                 school="St Peter's College", phone="+44 7700 900002"),
        ]
        db.add_all(users)
        db.flush()

        # 2. Create Trips
        print("Creating trips...")
        trips = [
            Trip(
                title="Discover Paris & Versailles", slug="discover-paris-versailles",
                destination="Paris", country="France", duration_days=5,
                base_per_student=Decimal("85"), base_per_adult=Decimal("110"),
                meal_per_person_per_day=Decimal("18"),
                transport_surcharge={"bus": 25, "train": 40, "flight": 120},
                extras={"Museum Pass": 28, "Seine River Cruise": 15},
                available_transport=["bus", "train", "flight"],
                available_extras={"Disneyland Day": 65},
                min_students=10, max_students=60
            ),
            Trip(
                title="Rome: Ancient History Tour", slug="rome-ancient-history",
                destination="Rome", country="Italy", duration_days=4,
                base_per_student=Decimal("95"), base_per_adult=Decimal("120"),
                meal_per_person_per_day=Decimal("20"),
                transport_surcharge={"flight": 150},
                extras={"Colosseum Underground": 22, "Vatican Museums": 25},
                available_transport=["flight"],
                min_students=15, max_students=45
            ),
            Trip(
                title="Iceland Geology Expedition", slug="iceland-geology",
                destination="Reykjavik", country="Iceland", duration_days=6,
                base_per_student=Decimal("140"), base_per_adult=Decimal("160"),
                meal_per_person_per_day=Decimal("30"),
                transport_surcharge={"flight": 210, "ferry": 90},
                extras={"Blue Lagoon": 55, "Glacier Walk": 70},
                available_transport=["flight", "ferry"],
                min_students=12, max_students=40
            ),
        ]
        db.add_all(trips)
        db.flush()

        # 3. Create Pricing Rules
        print("Creating pricing rules...")
        today = date.today()
        pricing_rules = [
            PricingRule(name="Early Bird 5%", rule_type="early_bird", discount_type="percentage",
                        discount_value=Decimal("5"), days_before_trip=90, is_active=True),
            PricingRule(name="Large Group 10%", rule_type="group_discount", discount_type="percentage",
                        discount_value=Decimal("10"), min_students=30, is_active=True),
            PricingRule(trip_id=trips[0].id, name="Paris Spring Offer", rule_type="seasonal",
                        discount_type="fixed", discount_value=Decimal("250"),
                        valid_from=today, valid_to=today + timedelta(days=120), is_active=True),
        ]
        db.add_all(pricing_rules)

        # 4. Create Availability
        print("Creating availability...")
        slots = []
        for trip in trips:
            for week in range(4, 20):
                slots.append(AvailabilitySlot(
                    trip_id=trip.id,
                    date=today + timedelta(weeks=week),
                    total_capacity=trip.max_students + 10,
                    booked_count=0,
                    is_available=True
                ))
        db.add_all(slots)

        # Commit all changes
        db.commit()
        print("Successfully created seed data!")
        print("Created:")
        print(f"  - {len(users)} users")
        print(f"  - {len(trips)} trips")
        print(f"  - {len(pricing_rules)} pricing rules")
        print(f"  - {len(slots)} availability slots")

    except Exception as e:
        print(f"Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
