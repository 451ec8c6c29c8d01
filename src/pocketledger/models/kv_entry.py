"""Key-value row backing the on-device store."""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pocketledger.core.db import Base
from pocketledger.utils.datetime import now_utc


class KeyValueEntry(Base):
    """
    One string blob per logical key.

    Keys in use:
    - "categories": JSON array of every user's custom and override records
    - "ipSecurity_<user_id>": one user's IP-security record
    - "currentIP": device-cached IP fingerprint
    """

    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )

    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key={self.key}, size={len(self.value)})>"
