# scripts/create_admin.py

import os
import sys
from getpass import getpass

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash

from app import app
from donor_app.models import User, UserRole, db  # noqa: F401


def create_admin():
    with app.app_context():
        name = input("Enter name: ").strip()
        email = input("Enter email: ").strip().lower()
        role_value = (input("Enter role [pmm/smm/vmm] (default pmm): ").strip() or "pmm").lower()

        try:
            role = UserRole(role_value)
        except ValueError:
            print("Error: Invalid role. Must be one of: pmm, smm, vmm")
            sys.exit(1)

        if not name:
            print("Error: Name cannot be empty.")
            sys.exit(1)

        existing = User.find_by_email(email)
        if existing:
            answer = input("Email already exists. Reset password and role? [y/N]: ").strip().lower()
            if answer != "y":
                print("Error: Email already exists.")
                sys.exit(1)

        password = getpass("Enter password: ")
        password2 = getpass("Confirm password: ")

        if password != password2:
            print("Error: Passwords do not match.")
            sys.exit(1)

        if len(password) < 6:
            print("Error: Password must be at least 6 characters.")
            sys.exit(1)

        if existing:
            updated, error = existing.safe_update(
                name=name,
                password_hash=generate_password_hash(password),
                role=role,
                is_active=True,
            )
            if not updated:
                print(f"Error updating account: {error}")
                sys.exit(1)
            print(f"✅ Staff account {existing.email} updated (role {existing.role.value}).")
            return

        user, error = User.safe_create(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            is_active=True,
        )

        if error:
            print(f"Error creating account: {error}")
            sys.exit(1)
        else:
            print("✅ Staff account created successfully!")
            print(f"   Name: {user.name}")
            print(f"   Email: {user.email}")
            print(f"   Role: {user.role.value}")


if __name__ == "__main__":
    create_admin()
