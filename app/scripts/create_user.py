"""
Create a local account (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user NAME EMAIL TEL PASSWORD [role]
Example:
  python -m app.scripts.create_user "Site Admin" admin@example.com 0812345678 your-secure-password admin
"""
import argparse
import sys

from app.core.database import session_scope
from app.core.errors import DuplicateKey
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.models.user import ROLES
from app.schemas.auth import normalize_email
from app.services.credentials import register


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a hotel booking account.")
    parser.add_argument("name", help="Display name")
    parser.add_argument("email", help="Email (stored lowercased)")
    parser.add_argument("tel", help="Phone number")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(ROLES))
    args = parser.parse_args()

    name = args.name.strip()
    if not name or len(name) > 255:
        print("Invalid name length.", file=sys.stderr)
        return 1
    try:
        email = normalize_email(args.email)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    with session_scope() as db:
        try:
            user = register(db, name, email, args.tel.strip(), args.password, args.role)
        except DuplicateKey:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
    print(f"Created user '{email}' (id={user.id}) with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
