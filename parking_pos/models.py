from sqlalchemy import Column, BigInteger, String, Boolean, DateTime, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from parking_pos.database import Base

# ================================
# Parking Tickets
# ================================
class ParkingTicket(Base):
    __tablename__ = "parking_tickets"

    id = Column(String(36), primary_key=True, index=True)
    vehicle_type = Column(String(20), nullable=False)
    is_pwd = Column(Boolean, nullable=False, default=False)
    fee_schedule = Column(String(20), nullable=False, default="standard")
    entry_time = Column(DateTime(timezone=True), nullable=False)
    exit_time = Column(DateTime(timezone=True))
    total_fee = Column(Numeric(10, 2))
    duration_minutes = Column(Integer)
    checked_out = Column(Boolean, nullable=False, default=False, index=True)
    issued_by_id = Column(String(64), nullable=False)
    checked_out_by_id = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    logs = relationship("ParkingLog", back_populates="ticket")

# ================================
# Payment Log (one row per closed ticket)
# ================================
class ParkingLog(Base):
    __tablename__ = "parking_logs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    ticket_id = Column(String(36), ForeignKey("parking_tickets.id"), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False)
    fee_charged = Column(Numeric(10, 2), nullable=False)
    checked_out_by_id = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    ticket = relationship("ParkingTicket", back_populates="logs")

# ================================
# Cashier Shift Ledger
# ================================
class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True)
    operator_id = Column(String(64), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
