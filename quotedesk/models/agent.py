from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship
from quotedesk.database import Base


class Agent(Base):
    __tablename__ = "agents"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    company_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))  # percent
    total_earnings = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    last_payment_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    client_infos = relationship("ClientInfo", back_populates="agent")
    quotes = relationship("Quote", back_populates="agent")

    @property
    def display_name(self):
        if self.company_name:
            return f"{self.name} ({self.company_name})"
        return self.name

    def __repr__(self):
        return f"<Agent {self.name} {self.commission_rate}%>"
