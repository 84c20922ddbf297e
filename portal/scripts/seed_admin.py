"""
Seed Admin Script
Creates an administrator account (or promotes an existing one) and its profile.
Needs SUPABASE_SERVICE_ROLE_KEY.

    python -m portal.scripts.seed_admin --email admin@example.com --password secret123
"""

import argparse
import sys

from portal.config import settings
from portal.database.supabase_client import get_service_supabase
from portal.modules.users.service import auth_users_by_id
from supabase import Client
from datetime import datetime, timezone
from typing import Optional
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def find_auth_user_id(supabase: Client, email: str) -> Optional[str]:
    for user_id, user in auth_users_by_id(supabase.auth.admin.list_users()).items():
        if (getattr(user, "email", None) or "").lower() == email.lower():
            return user_id
    return None


def seed_admin(supabase: Client, email: str, password: str, name: str = "Administrator") -> str:
    """Create or promote the admin user; returns its id"""
    user_id = find_auth_user_id(supabase, email)
    if user_id:
        logger.info(f"User {email} already exists, promoting to admin")
        supabase.auth.admin.update_user_by_id(user_id, {"password": password})
    else:
        response = supabase.auth.admin.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"name": name}
        })
        user_id = response.user.id
        logger.info(f"Created auth user {email}")

    supabase.table("profiles").upsert({
        "id": user_id,
        "email": email,
        "name": name,
        "role": "admin",
        "is_active": True,
        "updated_at": datetime.now(timezone.utc).isoformat()
    }).execute()
    logger.info(f"Profile for {email} set to admin")
    return user_id


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or promote a portal administrator")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Administrator")
    args = parser.parse_args(argv)

    if not settings.supabase_service_role_key:
        logger.error("SUPABASE_SERVICE_ROLE_KEY is required to seed an admin")
        sys.exit(1)
    if len(args.password) < 6:
        logger.error("Password must be at least 6 characters")
        sys.exit(1)

    try:
        seed_admin(get_service_supabase(), args.email, args.password, args.name)
        logger.info("Seeding completed successfully!")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
