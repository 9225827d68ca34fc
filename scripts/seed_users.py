#!/usr/bin/env python
"""Seed one local account per role for development and QA.

Usage:
    python scripts/seed_users.py [--password PASSWORD]

Creates ``<role>@example.com`` accounts (username ``demo_<role>``) with local
bcrypt passwords. Accounts that already exist are left untouched, so the
script can be re-run safely.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.models.user import Role
from src.schemas.user import UserCreateRequest
from src.services.user_service import UserService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "password123"

FULL_NAMES = {
    Role.CLIENT: "Demo Client",
    Role.FREELANCER: "Demo Freelancer",
    Role.ADMIN: "Site Admin",
    Role.SUPPORT: "Support Agent",
    Role.QA: "QA Tester",
    Role.DISPUTE_RESOLUTION: "Dispute Resolver",
    Role.ACCOUNTS: "Accounts Team",
}


async def seed_users(password: str) -> tuple[int, int]:
    """Create the seed accounts.

    Returns:
        tuple: (created, skipped) counts.
    """
    service = UserService()
    created = skipped = 0

    for role in Role:
        email = f"{role.value}@example.com"
        if await service.get_by_email(email):
            logger.info("Skipping %s (already exists)", email)
            skipped += 1
            continue

        user = await service.create_user(
            UserCreateRequest(
                email=email,
                username=f"demo_{role.value}",
                full_name=FULL_NAMES[role],
                role=role,
                password=password,
            )
        )
        logger.info("Created %s as user %s with role %s", email, user["id"], role.value)
        created += 1

    return created, skipped


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed one account per role")
    parser.add_argument("--password", default=DEFAULT_PASSWORD, help="Password for every seeded account")
    args = parser.parse_args()

    created, skipped = asyncio.run(seed_users(args.password))
    logger.info("Done: %d created, %d skipped", created, skipped)
    return 0


if __name__ == "__main__":
    sys.exit(main())
