#!/usr/bin/env python3
"""
Admin Seed Script

Creates the admin account from ADMIN_EMAIL / ADMIN_PASSWORD, or makes sure an
existing account with that email is an active admin. Set RESEED_ADMIN=true to
also reset its password.

Run: python scripts/seed_admin.py
"""
import sys
sys.path.insert(0, '.')

from sqlalchemy import text

from aerojob.core.auth import hash_password
from aerojob.core.config import get_settings
from aerojob.db.postgres import get_db_session, fetch_one


def seed_admin():
    settings = get_settings()
    email = settings.admin_email.lower()

    existing = fetch_one("SELECT user_id FROM users WHERE email = :email", {"email": email})

    with get_db_session() as db:
        if not existing:
            db.execute(
                text("""
                    INSERT INTO users (email, password_hash, first_name, last_name, role)
                    VALUES (:email, :password_hash, :first_name, :last_name, 'admin')
                """),
                {
                    "email": email,
                    "password_hash": hash_password(settings.admin_password),
                    "first_name": settings.admin_first_name,
                    "last_name": settings.admin_last_name
                }
            )
            print(f"✅ Admin created: {email}")
            return

        db.execute(
            text("UPDATE users SET role = 'admin', is_active = TRUE WHERE user_id = :id"),
            {"id": existing["user_id"]}
        )
        if settings.reseed_admin:
            db.execute(
                text("UPDATE users SET password_hash = :hash WHERE user_id = :id"),
                {"hash": hash_password(settings.admin_password), "id": existing["user_id"]}
            )
            print(f"🔄 Admin ensured/updated with new password: {email}")
        else:
            print(f"🔄 Admin ensured/updated: {email}")


if __name__ == "__main__":
    try:
        seed_admin()
    except Exception as e:
        print(f"❌ Seeding error: {e}")
        sys.exit(1)
