"""
Affiliate Tracker Backend: User SQLAlchemy Model
================================================

What:  ORM model for the `users` table (the credential store).
Who:   Read and written only by AuthService.

Table Design:
    - UUID primary key, generated in Python
    - email: stored lower-cased, unique index; the uniqueness guarantee for
      registration lives in the database, not in application code
    - password_hash: bcrypt hash string; the plaintext password is never stored
    - role: free-form string, "user" unless set otherwise; carried into
      session tokens but not used for access control
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from affiliate_tracker.database import Base

# Every account registered through the API gets this role
DEFAULT_ROLE = "user"


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier, unique across all users",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the password",
    )

    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_ROLE,
        server_default=text(f"'{DEFAULT_ROLE}'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        # No password hash in the repr: it ends up in logs and tracebacks
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
