"""
Script to give a staff member the admin role
Usage: python scripts/make_admin.py staff@example.com
"""

import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sayit import create_app
from extensions import db
from sayit.models import Staff, StaffRole


def make_admin(email):
    """Promote a staff member to admin by email"""
    app = create_app()

    with app.app_context():
        staff = Staff.query.filter_by(email=email.strip().lower()).first()

        if not staff:
            print(f"Staff member with email '{email}' not found")
            print("\nAvailable staff:")
            for member in Staff.query.order_by(Staff.email).all():
                print(f"   - {member.email} ({member.name}, {member.role})")
            print("\nCreate one with: flask --app run create-admin <email>")
            return False

        if staff.is_admin:
            print(f"Staff member '{email}' is already an admin")
            return True

        staff.role = StaffRole.ADMIN.value
        staff.is_active = True
        db.session.commit()

        print(f"Successfully made '{email}' an admin")
        print(f"   Name: {staff.name}")
        print(f"   Role: {staff.role}")
        return True


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Usage: python scripts/make_admin.py <email>")
        print("Example: python scripts/make_admin.py admin@example.com")
        sys.exit(1)

    sys.exit(0 if make_admin(sys.argv[1]) else 1)
