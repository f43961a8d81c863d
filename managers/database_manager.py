"""
BidHub Server - Database Manager

This module manages database connection, initialization, and operations.
"""

import secrets
import string
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
import bcrypt

from models.database import Base, User, AdminRole, PlatformSetting

# Default super admin account created on first run
DEFAULT_ADMIN_EMAIL = "superadmin@bidhub.local"

# Default platform settings: key -> (value, category, description)
DEFAULT_SETTINGS = {
    "admin_session_timeout_minutes": (
        "30", "security", "Minutes of inactivity before an admin session is closed"
    ),
    "session_lifetime_days": (
        "7", "security", "Maximum lifetime of a login session in days"
    ),
    "platform_currency": (
        "SAR", "general", "Currency used for platform amounts"
    ),
    "default_language": (
        "en", "general", "Default interface language (en or ar)"
    ),
}


class DatabaseManager:
    """
    Manages database connection, initialization, and operations
    """

    def __init__(self, db_path: str = "database/bidhub.db"):
        """
        Initialize database manager

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

        # Ensure database directory exists
        db_dir = Path(db_path).parent
        if db_dir and str(db_dir) != '.':
            db_dir.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{db_path}",
            echo=False,
            connect_args={"check_same_thread": False}
        )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def InitializeDatabase(self, admin_email: str = DEFAULT_ADMIN_EMAIL) -> Optional[str]:
        """
        Initialize the database with all tables and default data
        Creates tables if they don't exist, populates default settings,
        and creates a super admin on first run.

        Args:
            admin_email: Email for the super admin created on first run

        Returns:
            str: Generated admin password if the super admin was created, None otherwise
        """
        # Create all tables
        Base.metadata.create_all(bind=self.engine)

        session = self.SessionLocal()
        admin_password = None

        try:
            # First run when no admin role has ever been assigned
            is_first_run = session.query(AdminRole).count() == 0

            if is_first_run:
                admin_password = self.GenerateRandomPassword()
                self.CreateAdminUser(session, admin_email, admin_password, "super_admin")

            # Populate default settings if not present
            self.PopulateDefaultSettings(session)

            session.commit()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        return admin_password

    def CreateAdminUser(self, session, email: str, password: str, role: str) -> tuple[User, bool]:
        """
        Create a user with an active admin role, or assign the role to an existing user

        Args:
            session: SQLAlchemy session
            email: Login email
            password: Plain text password (only used when the user is created)
            role: Admin role name (see rbac.DEFAULT_ROLE_PERMISSIONS)

        Returns:
            (user: User, created: bool) - created is False when the account already existed
        """
        from rbac import BuildPermissionMap, DEFAULT_ROLE_PERMISSIONS

        if role not in DEFAULT_ROLE_PERMISSIONS:
            raise ValueError(f"Unknown admin role '{role}'")

        email = email.strip().lower()

        user = session.query(User).filter(User.email == email).first()
        created = user is None
        if created:
            user = User(
                email=email,
                password_hash=self.HashPassword(password),
                role="admin",
                status="active",
                email_verified=True,
                created_at=datetime.now(timezone.utc)
            )
            session.add(user)
            session.flush()  # Flush to get the user id

        existing_role = session.query(AdminRole).filter(AdminRole.user_id == user.id).first()
        if not existing_role:
            admin_role = AdminRole(
                user_id=user.id,
                role=role,
                permissions=BuildPermissionMap(DEFAULT_ROLE_PERMISSIONS[role]),
                active=True
            )
            session.add(admin_role)

        return user, created

    def PopulateDefaultSettings(self, session):
        """
        Populate default platform settings
        Only adds settings that don't already exist

        Args:
            session: SQLAlchemy session
        """
        for key, (value, category, description) in DEFAULT_SETTINGS.items():
            existing = session.query(PlatformSetting).filter(PlatformSetting.key == key).first()
            if not existing:
                setting = PlatformSetting(key=key, value=value, category=category, description=description)
                session.add(setting)

    def GetSettingValue(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Read a single platform setting

        Args:
            key: Setting key
            default: Value returned when the setting does not exist

        Returns:
            str: Stored value or default
        """
        session = self.GetSession()
        try:
            setting = session.query(PlatformSetting).filter(PlatformSetting.key == key).first()
            return setting.value if setting else default
        finally:
            session.close()

    @staticmethod
    def GenerateRandomPassword(length: int = 12) -> str:
        """
        Generate a secure random password

        Args:
            length: Password length (default 12)

        Returns:
            str: Generated password
        """
        # Use a mix of uppercase, lowercase, digits, and special characters
        alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
        password = ''.join(secrets.choice(alphabet) for _ in range(length))
        return password

    @staticmethod
    def HashPassword(password: str) -> str:
        """
        Hash a password using bcrypt
        Truncates to 72 bytes to comply with bcrypt's maximum password length

        Args:
            password: Plain text password

        Returns:
            str: Hashed password (as string)
        """
        password_bytes = password.encode('utf-8')[:72]

        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password_bytes, salt)

        return hashed.decode('utf-8')

    @staticmethod
    def VerifyPassword(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash
        Truncates to 72 bytes to match how the hash was created

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored password hash (as string)

        Returns:
            bool: True if password matches, False otherwise
        """
        if not hashed_password:
            return False

        password_bytes = plain_password.encode('utf-8')[:72]
        hashed_bytes = hashed_password.encode('utf-8')

        return bcrypt.checkpw(password_bytes, hashed_bytes)

    def GetSession(self):
        """
        Get a new database session

        Returns:
            Session: SQLAlchemy session
        """
        return self.SessionLocal()

    def GetActiveAdminRole(self, session, user_id: str) -> Optional[AdminRole]:
        """
        Get a user's active admin role

        Args:
            session: SQLAlchemy session
            user_id: User ID

        Returns:
            AdminRole: Active admin role, or None if the user is not an admin
        """
        return session.query(AdminRole).filter(
            AdminRole.user_id == user_id,
            AdminRole.active == True
        ).first()
