"""
Bootstrap tool: create the first admin account.

Usage:
  python create_admin.py <username> <email> <password> [name]

Example:
  python create_admin.py admin admin@example.com mySecurePassword123 "Shop Owner"
"""
import asyncio
import sys

from sqlalchemy import select, or_

from workforce.core.database import AsyncSessionLocal, create_tables
from workforce.core.security import hash_password
from workforce.models.user import User


async def main(username: str, email: str, password: str, name: str) -> None:
    if len(password) < 8:
        print("Error: password must be at least 8 characters long.")
        sys.exit(1)

    await create_tables()
    async with AsyncSessionLocal() as db:
        existing = await db.execute(
            select(User).where(or_(User.username == username, User.email == email))
        )
        if existing.scalars().first():
            print(f"A user with username '{username}' or email '{email}' already exists.")
            sys.exit(0)

        admin = User(
            username=username,
            email=email,
            name=name,
            hashed_password=hash_password(password),
            role="admin",
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        print(f"✓ Admin '{username}' created (ID: {admin.id})")


if __name__ == "__main__":
    if len(sys.argv) not in (4, 5):
        print("Usage: python create_admin.py <username> <email> <password> [name]")
        sys.exit(1)

    asyncio.run(main(sys.argv[1], sys.argv[2], sys.argv[3], sys.argv[4] if len(sys.argv) == 5 else "Administrator"))
