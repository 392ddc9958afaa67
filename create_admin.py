#!/usr/bin/env python3
"""Create the first admin user"""

import sys
import os
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from school_inventory.core.config import settings
from school_inventory.core.security import get_password_hash
from school_inventory.db.database import SessionLocal
from school_inventory.models.user import User, UserRole


def create_admin():
    """Create the admin account from FIRST_ADMIN_EMAIL / FIRST_ADMIN_PASSWORD"""
    db = SessionLocal()
    email = settings.FIRST_ADMIN_EMAIL.strip().lower()

    try:
        existing_admin = db.query(User).filter(User.email == email).first()

        if not existing_admin:
            admin_user = User(
                email=email,
                hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
                full_name='School Administrator',
                role=UserRole.ADMIN,
                is_active=True,
            )
            db.add(admin_user)
            db.commit()
            print(f'Admin created: {email}')
        else:
            print('Admin already exists')

    except Exception as e:
        print(f'Error creating admin: {e}')
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    create_admin()
