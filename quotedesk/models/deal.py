from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from quotedesk.database import Base


class DealRegistration(Base):
    __tablename__ = "deal_registrations"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_info_id = Column(Integer, ForeignKey("client_info.id", ondelete="CASCADE"), nullable=False)
    deal_name = Column(String(255), nullable=False)
    deal_value = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    stage = Column(String(50), nullable=False, default="Prospecting")
    status = Column(String(20), nullable=False, default="active")
    description = Column(Text, nullable=True)
    expected_close_date = Column(Date, nullable=True)
    probability = Column(Integer, nullable=True)
    source = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="deals")
    client_info = relationship("ClientInfo", back_populates="deals")

    STAGES = [
        "Prospecting",
        "Qualification",
        "Proposal",
        "Negotiation",
        "Closed Won",
        "Closed Lost",
    ]
    STATUSES = ["active", "inactive", "archived"]

    @property
    def is_closed(self):
        return self.stage in ("Closed Won", "Closed Lost")

    def __repr__(self):
        return f"<DealRegistration {self.deal_name}>"
