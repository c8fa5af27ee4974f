from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from quotedesk.database import Base


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("agents.id", ondelete="SET NULL"), nullable=True, index=True)
    client_info_id = Column(
        Integer, ForeignKey("client_info.id", ondelete="SET NULL"), nullable=True, index=True
    )
    quote_number = Column(String(50), nullable=True, index=True)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    commission_override = Column(Numeric(5, 2), nullable=True)
    commission = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    status = Column(String(50), nullable=False, default="pending")
    acceptance_status = Column(String(50), nullable=True)
    accepted_by = Column(String(255), nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    date = Column(Date, nullable=True)
    expires_at = Column(Date, nullable=True)
    billing_address = Column(Text, nullable=True)
    service_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    user = relationship("User", back_populates="quotes")
    agent = relationship("Agent", back_populates="quotes")
    client_info = relationship("ClientInfo", back_populates="quotes")
    line_items = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteItem.sort_order",
    )
    order = relationship("Order", back_populates="quote", uselist=False)

    STATUSES = ["pending", "sent", "approved", "declined", "archived"]

    @property
    def base_number(self):
        """Quote number without its revision suffix."""
        if not self.quote_number:
            return None
        return self.quote_number.split(".", 1)[0]

    @property
    def is_revision(self):
        return bool(self.quote_number) and "." in self.quote_number

    @property
    def mrc_items(self):
        return [item for item in self.line_items if item.charge_type == "MRC"]

    @property
    def nrc_items(self):
        return [item for item in self.line_items if item.charge_type == "NRC"]

    def __repr__(self):
        return f"<Quote {self.quote_number}>"


class QuoteItem(Base):
    __tablename__ = "quote_items"

    id = Column(Integer, primary_key=True)
    quote_id = Column(
        Integer,
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id = Column(Integer, ForeignKey("items.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(15, 4), nullable=False, default=Decimal("1"))
    unit_price = Column(Numeric(15, 4), nullable=False, default=Decimal("0"))
    cost_override = Column(Numeric(15, 4), nullable=True)
    total_price = Column(Numeric(15, 2), nullable=False, default=Decimal("0"))
    charge_type = Column(String(3), nullable=False, default="MRC")  # MRC, NRC
    address = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    quote = relationship("Quote", back_populates="line_items")
    item = relationship("Item")

    CHARGE_TYPES = ["MRC", "NRC"]

    @property
    def display_name(self):
        """Catalog item name, falling back to the name typed on the line."""
        if self.item is not None and self.item.name:
            return self.item.name
        return self.name

    @property
    def category_name(self):
        if self.item is not None and self.item.category is not None:
            return self.item.category.name
        return None

    def __repr__(self):
        return f"<QuoteItem {(self.display_name or '')[:30]}>"
