# scripts/seed_database.py
"""
Database seeding script.
Populates the database with sample staff, donors, events and donor lists for development.
"""

import argparse
import os
import random
import sys
from datetime import date, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from faker import Faker

from app import app
from donor_app.importer.parsing import parse_date
from donor_app.models import Donor, DonorReviewStatus, Event, EventDonor, EventDonorList, User, UserRole, db
from donor_app.services import donor_list_service, event_service
from donor_app.utils.errors import APIError

fake = Faker()

EVENT_TYPES = ("Gala", "Luncheon", "Donor Tour", "Reception", "Golf Outing")
CITIES = ("Kansas City", "Overland Park", "Lawrence", "Independence", "Lee's Summit")
TAGS = ("major-gifts", "board", "alumni", "corporate", "legacy", "monthly")

# Statistics tracking
stats = {
    "users": 0,
    "donors": 0,
    "events": 0,
    "list_entries": 0,
    "errors": [],
}


def _commit_batch(pending_count, batch_size):
    """Commit the current SQLAlchemy session if we've reached the batch threshold."""
    if pending_count >= batch_size:
        try:
            db.session.commit()
            return 0
        except Exception as exc:  # noqa: BLE001 - surface commit issues during seeding
            db.session.rollback()
            stats["errors"].append(f"Batch commit failed: {exc}")
            print(f"  ❌ Batch commit failed: {exc}")
            return 0
    return pending_count


def clear_database():
    """Clear all seeded data from the database"""
    print("Clearing existing data...")
    try:
        # Delete in reverse order of dependencies
        EventDonor.query.delete()
        EventDonorList.query.delete()
        Event.query.delete()
        for donor in Donor.query.all():
            db.session.delete(donor)
        db.session.commit()
        print("✅ Database cleared")
    except Exception as e:
        db.session.rollback()
        print(f"❌ Error clearing database: {str(e)}")
        sys.exit(1)


def seed_users(password, dry_run=False):
    """Create one staff account per relationship-manager role"""
    print("\n📝 Seeding staff users...")
    users = []
    for role in UserRole:
        email = f"{role.value}@example.org"
        if dry_run:
            print(f"  [DRY RUN] Would create {role.value} user: {email}")
            continue

        existing = User.find_by_email(email)
        if existing:
            print(f"  ⏭️  User '{email}' already exists, skipping")
            users.append(existing)
            continue

        user = User(name=fake.name(), email=email, role=role, is_active=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        stats["users"] += 1
        users.append(user)
        print(f"  ✅ Created {role.value} user: {email}")
    return users


def _fake_donor(users):
    is_organization = random.random() < 0.2
    first_gift = fake.date_between(start_date="-15y", end_date="-2y")
    last_gift = fake.date_between(start_date=first_gift, end_date="today")
    largest = round(random.uniform(50, 25000), 2)
    donor = Donor(
        first_name=None if is_organization else fake.first_name(),
        last_name=None if is_organization else fake.last_name(),
        organization_name=fake.company() if is_organization else None,
        pmm=random.choice(users).name if users else None,
        city=random.choice(CITIES),
        address_line1=fake.street_address(),
        total_donations=round(largest * random.uniform(1, 8), 2),
        total_pledges=round(random.uniform(0, 5000), 2),
        largest_gift=largest,
        last_gift_amount=round(random.uniform(25, largest), 2),
        first_gift_date=parse_date(first_gift),
        last_gift_date=parse_date(last_gift),
        communication_preference=random.choice(("Email", "Mail", "Phone")),
        excluded=random.random() < 0.05,
        deceased=random.random() < 0.02,
    )
    donor.set_tags(random.sample(TAGS, k=random.randint(0, 2)))
    return donor


def seed_donors(users, count, dry_run=False, batch_size=100):
    print(f"\n📝 Seeding {count} donors...")
    if dry_run:
        print(f"  [DRY RUN] Would create {count} donors")
        return []

    donors = []
    pending = 0
    for _ in range(count):
        donor = _fake_donor(users)
        db.session.add(donor)
        donors.append(donor)
        pending = _commit_batch(pending + 1, batch_size)
    db.session.commit()
    stats["donors"] += len(donors)
    print(f"  ✅ Created {len(donors)} donors")
    return donors


def seed_events(users, donors, count, dry_run=False):
    """Create events through the service layer and fill their donor lists"""
    print(f"\n📝 Seeding {count} events...")
    if dry_run:
        print(f"  [DRY RUN] Would create {count} events with donor lists")
        return []

    events = []
    statuses = (DonorReviewStatus.PENDING, DonorReviewStatus.APPROVED, DonorReviewStatus.EXCLUDED)
    for _ in range(count):
        creator = random.choice(users) if users else None
        event_date = date.today() + timedelta(days=random.randint(14, 240))
        payload = {
            "name": f"{fake.city()} {random.choice(EVENT_TYPES)}",
            "type": random.choice(EVENT_TYPES),
            "date": event_date.isoformat(),
            "location": fake.city(),
            "capacity": random.choice((None, 50, 120, 300)),
            "criteriaMinGivingLevel": random.choice((0, 500, 1000, 5000)),
            "timelineReviewDeadline": (event_date - timedelta(days=10)).isoformat(),
        }
        try:
            event = event_service.create_event(payload, creator)
            members = random.sample(donors, k=min(len(donors), random.randint(5, 25)))
            items = []
            for donor in members:
                status = random.choice(statuses)
                item = {"donor_id": donor.id, "status": status.value}
                if status is DonorReviewStatus.EXCLUDED:
                    item["exclude_reason"] = random.choice(("Recently solicited", "Out of town", ""))
                items.append(item)
            if items:
                donor_list_service.add_donors(event.donor_list, items, creator)
                stats["list_entries"] += len(items)
        except APIError as e:
            stats["errors"].append(f"Event: {e.message}")
            print(f"  ❌ Error creating event: {e.message}")
            continue
        stats["events"] += 1
        events.append(event)
    print(f"  ✅ Created {len(events)} events")
    return events


def seed_database(clear=False, donors=200, events=8, password="password123", dry_run=False):
    """Main function to seed the database"""
    print("=" * 60)
    print("Database Seeding Script")
    print("=" * 60)

    if dry_run:
        print("\n⚠️  DRY RUN MODE - No changes will be made to the database\n")

    with app.app_context():
        db.create_all()

        if clear and not dry_run:
            clear_database()

        users = seed_users(password, dry_run)
        donor_rows = seed_donors(users, donors, dry_run)
        seed_events(users, donor_rows, events, dry_run)

        # Print summary
        print("\n" + "=" * 60)
        print("Seeding Summary")
        print("=" * 60)
        print(f"Users: {stats['users']}")
        print(f"Donors: {stats['donors']}")
        print(f"Events: {stats['events']}")
        print(f"List entries: {stats['list_entries']}")

        if stats["errors"]:
            print(f"\n⚠️  Errors encountered: {len(stats['errors'])}")
            for error in stats["errors"][:10]:
                print(f"  - {error}")
            if len(stats["errors"]) > 10:
                print(f"  ... and {len(stats['errors']) - 10} more errors")
        else:
            print("\n✅ Seeding completed successfully!")

        if not dry_run:
            print("\nDefault credentials:")
            print(f"  pmm@example.org / smm@example.org / vmm@example.org with password {password}")


def main():
    """Command-line interface"""
    parser = argparse.ArgumentParser(description="Seed the database with sample data")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing donors, events and lists before seeding",
    )
    parser.add_argument("--donors", type=int, default=200, help="Number of donors (default: 200)")
    parser.add_argument("--events", type=int, default=8, help="Number of events (default: 8)")
    parser.add_argument(
        "--password",
        default="password123",
        help="Password for seeded staff accounts (default: password123)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created without actually creating",
    )

    args = parser.parse_args()
    seed_database(
        clear=args.clear,
        donors=args.donors,
        events=args.events,
        password=args.password,
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    main()
