"""ORM model for application accounts (auth and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from layout_library.core.security import hash_password, verify_password
from layout_library.models.base import Base, utcnow


class User(Base):
    """
    Account for JWT authentication and role-based access control.

    role: 'admin' or 'user'. Only the bcrypt hash of the password is stored;
    assign plain text through the ``password`` property.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    layouts = relationship("Layout", back_populates="creator")

    @property
    def password(self) -> None:
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plain_password: str) -> None:
        self.password_hash = hash_password(plain_password)

    def check_password(self, plain_password: str) -> bool:
        return verify_password(plain_password, self.password_hash)
