from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from quotedesk.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, unique=True)
    order_number = Column(String(50), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("agents.id", ondelete="SET NULL"), nullable=True)
    client_info_id = Column(Integer, ForeignKey("client_info.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    status = Column(String(50), nullable=False, default="pending")
    commission = Column(Numeric(12, 2), nullable=True)
    commission_override = Column(Numeric(5, 2), nullable=True)
    billing_address = Column(Text, nullable=True)
    service_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    quote = relationship("Quote", back_populates="order")
    circuit_trackings = relationship("CircuitTracking", back_populates="order", cascade="all, delete-orphan")

    STATUSES = ["pending", "processing", "completed", "cancelled"]

    def __repr__(self):
        return f"<Order {self.order_number}>"
