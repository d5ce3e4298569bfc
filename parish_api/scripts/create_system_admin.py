from __future__ import annotations

import argparse
import logging

from sqlalchemy.orm import Session

from parish_api.auth.security import hash_password
from parish_api.core.db import SessionLocal
from parish_api.core.logging import configure_logging
from parish_api.models.user import User
from parish_api.services.hierarchy import SYSTEM_ADMIN

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the first SYSTEM_ADMIN account.")
    parser.add_argument("--email", required=True, help="Login email for the administrator")
    parser.add_argument("--password", required=True, help="Initial password (at least 8 characters)")
    parser.add_argument("--name", default="System Administrator", help="Display name")
    return parser.parse_args(argv)


def ensure_system_admin(db: Session, email: str, password: str, name: str) -> tuple[User, bool]:
    """Return the existing system admin, or create one. The flag is True when a user was created."""
    existing = db.query(User).filter(User.role == SYSTEM_ADMIN).order_by(User.id.asc()).first()
    if existing is not None:
        return existing, False
    if db.query(User.id).filter(User.email == email.lower()).first():
        raise SystemExit(f"A user with email {email} already exists")

    user = User(
        email=email.lower(),
        name=name.strip(),
        hashed_password=hash_password(password),
        role=SYSTEM_ADMIN,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def main(argv: list[str] | None = None) -> None:
    configure_logging()
    args = parse_args(argv)
    if len(args.password) < 8:
        raise SystemExit("Password must be at least 8 characters")

    db = SessionLocal()
    try:
        user, created = ensure_system_admin(db, args.email, args.password, args.name)
    finally:
        db.close()

    if created:
        logger.info("system_admin_created", extra={"user_id": user.id, "email": user.email})
    else:
        logger.info("system_admin_exists", extra={"user_id": user.id, "email": user.email})


if __name__ == "__main__":
    main()
