"""
Create the first admin account (every other admin is created through the API).

    python -m repairhub.bootstrap_admin admin@example.com 'Secret123'
"""
import argparse
import logging

from sqlalchemy.orm import Session

from repairhub.database import SessionLocal, create_tables
from repairhub.models.role import UserRole
from repairhub.models.user import User
from repairhub.utils.security import hash_password

logger = logging.getLogger(__name__)


def create_admin(db: Session, email: str, password: str, name: str | None = None) -> User:
    email = email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        logger.info(f"Account {email} already exists (role={existing.role.value})")
        return existing

    admin = User(name=name, email=email, password=hash_password(password), role=UserRole.ADMIN, isActive=True)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Admin account {admin.id} created for {email}")
    return admin


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the first admin account")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    create_tables()
    db = SessionLocal()
    try:
        create_admin(db, args.email, args.password, args.name)
    finally:
        db.close()


if __name__ == "__main__":
    main()
