"""
Create a user from the command line (e.g. a recovery admin). Run from project root:
  python -m famli.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m famli.scripts.create_user alice alice@example.com your-secure-password admin
"""
import argparse
import sys

from famli.core.database import SessionLocal, init_db
from famli.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, USERNAME_MAX_LEN, hash_password
from famli.services.credentials import DuplicateUserError, insert_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Famli user.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="viewer", choices=["admin", "editor", "viewer"])
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = args.email.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not email:
        print("Email is required.", file=sys.stderr)
        return 1
    if not PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    init_db()
    db = SessionLocal()
    try:
        insert_user(db, username, email, hash_password(args.password), args.role)
    except DuplicateUserError as e:
        print(f"{e.message}.", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
