"""
Create an account (the only way to create an admin). Run from project root:
  python -m geocats.scripts.create_user USER_NAME EMAIL PASSWORD [role]
Example:
  python -m geocats.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from geocats.core.database import SessionLocal
from geocats.core.errors import RepositoryConflictError, RepositoryError
from geocats.core.security import hash_password
from geocats.schemas.auth import Role
from geocats.services.repository import UserRepository


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a GeoCats account.")
    parser.add_argument("user_name", help="User name (1-255 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args()

    user_name = args.user_name.strip()
    if not user_name or len(user_name) > 255:
        print("Invalid user name length.", file=sys.stderr)
        return 1
    if "@" not in args.email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if len(args.password) < 8 or len(args.password) > 128:
        print("Password must be 8-128 characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = UserRepository(db).create(
            user_name=user_name,
            email=args.email.strip(),
            password_hash=hash_password(args.password),
            role=Role(args.role),
        )
    except RepositoryConflictError:
        print(f"User name '{user_name}' or email '{args.email}' already exists.", file=sys.stderr)
        return 1
    except RepositoryError as e:
        print(f"Could not create user: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user_name}' ({user.id}) with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
