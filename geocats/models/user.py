"""ORM model for accounts (auth and owner/admin access control)."""

import uuid

from sqlalchemy import CheckConstraint, Column, String, Uuid
from sqlalchemy.orm import relationship

from geocats.models.base import Base
from geocats.schemas.auth import Role


class User(Base):
    """
    Account that owns cats and authenticates with a JWT.

    role: 'user' or 'admin'. Registration always stores 'user'; admins are created
    with the create_user script.
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_name = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)

    cats = relationship(
        "Cat",
        back_populates="owner",
        cascade="all, delete",
    )

    @property
    def role_enum(self) -> Role:
        return Role(self.role)
