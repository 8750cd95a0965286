"""
Storefront Backend - User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.

Column notes:
    email:     AES-256-CTR ciphertext (hex). Encryption is deterministic, so
               the column doubles as the equality-lookup key for login and
               duplicate checks; it is never decrypted for comparison.
    password:  "salt:hash" from CredentialCodec.hash_password().
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    username: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    provider: Mapped[str] = mapped_column(String(20), nullable=False, default="local")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        # email is ciphertext and password is a hash; neither is printed.
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
