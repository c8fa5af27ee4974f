from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from quotedesk.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, index=True)  # Admin, Agent
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    quotes = relationship("Quote", back_populates="user")
    deals = relationship("DealRegistration", back_populates="user")

    ROLES = ["Admin", "Agent"]

    @property
    def is_admin(self):
        return self.role == "Admin"

    def can_edit_quote(self, quote):
        """Admins edit everything; agents only their own quotes."""
        if self.is_admin:
            return True
        return quote.user_id == self.id

    def __repr__(self):
        return f"<User {self.email}>"
