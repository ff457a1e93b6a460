"""Command-line maintenance entry point.

Usage:
    python src/main.py seed            Create default categories and the admin
                                       account from ADMIN_* variables.
    python src/main.py purge-sessions  Delete expired sign-in sessions.
"""

import logging
import sys

from config import ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_USERNAME
from core.database import SessionLocal
from core.exceptions import ConflictError, QuizHubError
from core.logging_config import setup_logging
from utils.category_manager import CategoryManager
from utils.session_manager import SessionManager
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Web Security", "Injection, auth hardening, browser attacks."),
    ("IoT Security", "Firmware, radio protocols, and embedded risks."),
    ("Hardware Security", "Side-channel analysis, tamper resistance, boot chains."),
    ("Cryptography", "Protocols, key management, and practical crypto design."),
    ("Social Engineering", "Human-layer attacks and defensive playbooks."),
]


def seed() -> None:
    """Create default categories and the bootstrap admin. Safe to rerun."""
    with SessionLocal() as db:
        categories = CategoryManager(db)
        for name, description in DEFAULT_CATEGORIES:
            try:
                category = categories.create_category(name, description)
                print(f"✓ Category created: {category.id}")
            except ConflictError:
                print(f"- Category exists: {name}")

        if not (ADMIN_EMAIL and ADMIN_USERNAME and ADMIN_PASSWORD):
            print("ADMIN_EMAIL, ADMIN_USERNAME and ADMIN_PASSWORD are required "
                  "to seed the admin account; skipping.")
            return

        users = UserManager(db)
        try:
            admin = users.create_user_as_admin(
                email=ADMIN_EMAIL,
                username=ADMIN_USERNAME,
                password=ADMIN_PASSWORD,
                role="admin",
            )
            print(f"✓ Admin created: {admin.username}")
        except ConflictError:
            print("- Admin user already exists.")


def purge_sessions() -> None:
    with SessionLocal() as db:
        removed = SessionManager(db).purge_expired_sessions()
    print(f"✓ Removed {removed} expired session(s)")


COMMANDS = {
    "seed": seed,
    "purge-sessions": purge_sessions,
}


def main() -> None:
    """Main entry point."""
    setup_logging()

    # Parse command line arguments
    command = sys.argv[1] if len(sys.argv) > 1 else ""
    if command not in COMMANDS:
        print(__doc__)
        sys.exit(2)

    try:
        COMMANDS[command]()
    except QuizHubError as e:
        logger.error("Command %s failed: %s", command, e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()
