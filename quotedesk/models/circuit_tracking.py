from datetime import datetime
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from quotedesk.database import Base


class CircuitTracking(Base):
    __tablename__ = "circuit_tracking"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    quote_item_id = Column(
        Integer, ForeignKey("quote_items.id", ondelete="SET NULL"), nullable=True, index=True
    )
    circuit_type = Column(String(100), nullable=False, default="Circuit")
    stage = Column(String(100), nullable=True, default="Ready to Order")
    progress_percentage = Column(Integer, nullable=False, default=0)
    estimated_completion_date = Column(Date, nullable=True)
    actual_completion_date = Column(Date, nullable=True)
    item_name = Column(String(255), nullable=True)
    item_description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="circuit_trackings")
    quote_item = relationship("QuoteItem")
    milestones = relationship(
        "CircuitMilestone",
        back_populates="circuit_tracking",
        cascade="all, delete-orphan",
        order_by="CircuitMilestone.created_at",
    )

    # Common values only; stage is free-form
    STAGES = [
        "Ready to Order",
        "Ordered",
        "Site Survey",
        "Installation Scheduled",
        "Installed",
        "Testing",
        "Completed",
    ]

    def __repr__(self):
        return f"<CircuitTracking {self.id} {self.stage}>"


class CircuitMilestone(Base):
    __tablename__ = "circuit_milestones"

    id = Column(Integer, primary_key=True)
    circuit_tracking_id = Column(
        Integer, ForeignKey("circuit_tracking.id", ondelete="CASCADE"), nullable=False, index=True
    )
    milestone_name = Column(String(255), nullable=False)
    milestone_description = Column(Text, nullable=True)
    target_date = Column(Date, nullable=True)
    completed_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    circuit_tracking = relationship("CircuitTracking", back_populates="milestones")

    STATUSES = ["pending", "in_progress", "completed", "delayed"]

    def __repr__(self):
        return f"<CircuitMilestone {self.milestone_name}>"
