"""Script to create the first admin account.

Self-registration always produces the User role, so the initial admin is
created here. Reads ADMIN_EMAIL, ADMIN_PASSWORD and ADMIN_USERNAME.
"""

import asyncio
import os

from src.car_rental.domain.entities.user import User, UserRole
from src.car_rental.domain.value_objects.auth import PasswordHasher, validate_email, validate_password
from src.car_rental.infrastructure.database.connection import DatabaseManager
from src.car_rental.infrastructure.repositories.sql_repositories import SQLAlchemyUserRepository
from src.car_rental.presentation.api.config import get_settings


async def create_admin_user():
    """Create or promote the admin account."""
    email = validate_email(os.getenv("ADMIN_EMAIL", "admin@example.com"))
    password = validate_password(os.getenv("ADMIN_PASSWORD", "admin123"))
    username = os.getenv("ADMIN_USERNAME", "admin")

    database_manager = DatabaseManager(get_settings().database_url)
    await database_manager.connect()

    try:
        async with database_manager.get_session() as session:
            user_repository = SQLAlchemyUserRepository(session)
            user = await user_repository.find_by_email(email)

            if user is None:
                user = User(
                    username=username,
                    email=email,
                    password_hash=PasswordHasher.create_password_hash(password),
                    role=UserRole.ADMIN
                )
                await user_repository.save(user)
                print(f"✅ Created admin: {email} (id={user.id})")
            elif not user.is_admin():
                user.change_role(UserRole.ADMIN)
                await user_repository.save(user)
                print(f"✅ Promoted to admin: {email}")
            else:
                print(f"ℹ️ Admin already exists: {email}")

    finally:
        await database_manager.disconnect()


if __name__ == "__main__":
    asyncio.run(create_admin_user())
