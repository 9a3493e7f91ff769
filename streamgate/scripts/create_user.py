"""
Create a user by hand (e.g. an extra admin). Run from project root after seeding roles:
  python -m streamgate.scripts.create_user EMAIL USERNAME PASSWORD [role]
Example:
  python -m streamgate.scripts.create_user ops@example.com ops your-secure-password admin
"""
import argparse
import sys

from streamgate.core.database import SessionLocal
from streamgate.core.roles import RoleName
from streamgate.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
)
from streamgate.services.credential_store import SqlAlchemyCredentialStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a StreamGate user.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=RoleName.FREE.value,
        choices=[r.value for r in RoleName],
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    db = SessionLocal()
    try:
        store = SqlAlchemyCredentialStore(db)
        if store.find_identity_by_email(args.email) is not None:
            print(f"User '{args.email}' already exists.", file=sys.stderr)
            return 1
        role = store.find_role_by_name(args.role)
        if role is None:
            print(
                f"Role '{args.role}' not found; run `python -m streamgate.seed` first.",
                file=sys.stderr,
            )
            return 1
        store.create_identity(
            email=args.email,
            username=username,
            hashed_password=hash_password(args.password),
            role=role,
        )
        print(f"Created user '{args.email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
