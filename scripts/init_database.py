# scripts/init_database.py

"""
Database initialization script.
Creates all tables and reconciles donor-list counters with their entries.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app
from donor_app.models import db
from donor_app.services.donor_list_stats import recompute_all_lists


def init_database():
    """Create tables and repair any drifted donor-list counters"""
    with app.app_context():
        print("Creating database tables...")
        db.create_all()
        print("Database tables created")

        print("Checking donor list counters...")
        changed = recompute_all_lists()
        db.session.commit()
        if changed:
            print(f"Corrected counters on {len(changed)} donor list(s): {', '.join(str(i) for i in changed)}")
        else:
            print("Donor list counters are consistent")

        print("\nDatabase initialization complete!")
        print("\nNext steps:")
        print("  1. Create a staff account: python scripts/create_admin.py")
        print("  2. Load sample data: python scripts/seed_database.py")
        print("  3. Or import donors: flask --app app importer donors path/to/donors.csv")


if __name__ == "__main__":
    init_database()
