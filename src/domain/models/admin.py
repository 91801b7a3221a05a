from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4


class AdminRole(enum.Enum):
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


@dataclass
class Admin:
    id: UUID = field(default_factory=uuid4)
    username: str = ""
    email: str = ""
    hashed_password: str = ""
    full_name: Optional[str] = None
    role: AdminRole = AdminRole.ADMIN
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
