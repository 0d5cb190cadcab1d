# technurture/create_admin.py
# Create an admin account on whichever backend the environment selects:
#   python -m technurture.create_admin --username alice --password 'S3cure!pass'

import argparse
import asyncio
import sys

from dotenv import load_dotenv

from technurture.schemas.user import UserCreate
from technurture.services.auth import auth_service
from technurture.storage import DuplicateError, close_storage, get_storage
from technurture.utils.log import boot_log


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--force", action="store_true", help="skip the password policy check")
    return parser.parse_args(argv)


async def create_admin(username: str, password: str, force: bool = False) -> int:
    """Returns a process exit code: 0 created or already present, 1 rejected."""
    if not force:
        check = auth_service.validate_password(password)
        if not check.is_valid:
            for error in check.errors:
                print(f"  - {error}", file=sys.stderr)
            return 1

    storage = await get_storage()
    try:
        existing = await storage.get_user_by_username(username)
        if existing is not None:
            print(f"User '{username}' already exists (role: {existing.role})")
            return 0
        try:
            user = await storage.create_user(
                UserCreate(username=username, password=auth_service.hash_password(password), role="admin")
            )
        except DuplicateError as e:
            print(str(e), file=sys.stderr)
            return 1
        boot_log.log_info_sync("admin", "Admin user created", {"id": user.id, "username": user.username})
        print(f"Admin '{user.username}' created on {storage.name} storage (id {user.id})")
        if storage.name == "memory":
            print("Note: the in-memory backend does not persist; configure a database first.")
        return 0
    finally:
        await close_storage()


def main(argv=None) -> int:
    load_dotenv()
    args = parse_args(argv)
    return asyncio.run(create_admin(args.username.strip(), args.password, args.force))


if __name__ == "__main__":
    sys.exit(main())
