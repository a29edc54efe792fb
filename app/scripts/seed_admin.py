"""Seed script to create or update a clinic administrator.

Administrators may cancel or move any appointment.

Usage:
    python -m app.scripts.seed_admin --email=admin@example.com --name="Front Desk"
"""

import argparse
import asyncio
import sys

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select

from app.core.database import async_session
from app.models.admin import Admin


async def create_or_update_admin(email: str, full_name: str, session_factory=async_session) -> Admin:
    """Create an active admin, or reactivate and rename an existing one."""
    async with session_factory() as db:
        result = await db.execute(select(Admin).where(Admin.email == email))
        admin = result.scalar_one_or_none()

        if admin:
            print(f"✅ Admin {email} already exists. Reactivating...")
            admin.full_name = full_name
            admin.is_active = True
        else:
            print(f"🆕 Creating new admin: {email}...")
            admin = Admin(email=email, full_name=full_name, role="admin", is_active=True)
            db.add(admin)

        await db.commit()
        await db.refresh(admin)

    print(f"\n🎉 Admin setup complete!")
    print(f"   Id: {admin.id}")
    print(f"   Email: {email}")
    return admin


def main():
    """Parse CLI arguments and run the seed script."""
    parser = argparse.ArgumentParser(description="Create or update an administrator for MediSlot")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--name", default="Administrator", help="Display name")

    args = parser.parse_args()

    try:
        email = validate_email(args.email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        print(f"❌ Error: Invalid email: {e}", file=sys.stderr)
        sys.exit(1)

    asyncio.run(create_or_update_admin(email, args.name))


if __name__ == "__main__":
    main()
