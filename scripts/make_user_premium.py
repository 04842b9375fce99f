"""
Script to set a user's tier (and optionally admin flag) by email.
Run: python -m scripts.make_user_premium user@example.com [--tier free|premium] [--admin]
"""
import argparse
import logging
import sys

from app.db.session import SessionLocal
from app.core.plan_limits import SUPPORTED_TIERS, TIER_PREMIUM
from app.services.billing_service import find_user_by_email, upgrade_user_subscription

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def set_user_tier(email: str, tier: str = TIER_PREMIUM, make_admin: bool = False) -> bool:
    """Change an existing user's tier. Returns False if the user is missing."""
    db = SessionLocal()
    try:
        user = find_user_by_email(db, email)
        if not user:
            logger.error(f"User {email} not found")
            return False

        logger.info(f"Found existing user: {email} (ID: {user.id})")
        user = upgrade_user_subscription(db, user.id, tier)

        if make_admin and not user.is_admin:
            user.is_admin = True
            db.commit()
            logger.info(f"Granted admin access to {email}")

        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating user: {e}", exc_info=True)
        return False
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Set a SubSimplify user's plan tier")
    parser.add_argument("email")
    parser.add_argument("--tier", choices=SUPPORTED_TIERS, default=TIER_PREMIUM)
    parser.add_argument("--admin", action="store_true", help="Also grant admin access")
    args = parser.parse_args(argv)

    if set_user_tier(args.email, args.tier, args.admin):
        print(f"\n[SUCCESS] User {args.email} is now on the {args.tier} plan")
        return 0
    print(f"\n[ERROR] Failed to update user {args.email}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
