from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Time, Integer, Float, Text, ForeignKey,
)
from sqlalchemy.orm import relationship
from database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo so every column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ── Accounts ─────────────────────────────────────────────────────────────────
class User(Base):
    __tablename__ = "users"

    id                   = Column(Integer,     primary_key=True, autoincrement=True)
    first_name           = Column(String(100), nullable=False)
    last_name            = Column(String(100), nullable=False)
    email                = Column(String(255), unique=True, nullable=False, index=True)
    password_hash        = Column(String(255), nullable=False)
    # 'attendee' | 'organizer'
    account_type         = Column(String(20),  default="attendee", nullable=False)
    is_admin             = Column(Boolean,     default=False, nullable=False)
    # 'not_submitted' | 'pending' | 'approved' | 'rejected'
    kyc_status           = Column(String(20),  default="not_submitted", nullable=False)
    # 'personal' | 'business'
    kyc_type             = Column(String(20),  nullable=True)
    # Assigned by an admin on KYC approval, never by the user
    paystack_split_code  = Column(String(100), nullable=True)
    kyc_submitted_at     = Column(DateTime,    nullable=True)
    kyc_approved_at      = Column(DateTime,    nullable=True)
    kyc_rejected_at      = Column(DateTime,    nullable=True)
    kyc_rejection_reason = Column(Text,        nullable=True)
    created_at           = Column(DateTime,    default=utcnow, nullable=False)

    events      = relationship("Event", back_populates="organizer")
    tickets     = relationship("Ticket", back_populates="user")
    kyc_request = relationship("KycRequest", back_populates="user", uselist=False)

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ── Events ───────────────────────────────────────────────────────────────────
class Event(Base):
    __tablename__ = "events"

    id                   = Column(Integer,     primary_key=True, autoincrement=True)
    slug                 = Column(String(255), unique=True, nullable=False, index=True)
    organizer_id         = Column(Integer,     ForeignKey("users.id"), nullable=False, index=True)
    title                = Column(String(200), nullable=False)
    description          = Column(Text,        nullable=False)
    category             = Column(String(50),  nullable=False, index=True)
    event_date           = Column(Date,        nullable=False, index=True)
    start_time           = Column(Time,        nullable=False)
    end_time             = Column(Time,        nullable=False)
    # 'physical' | 'virtual'; venue and location only for physical events
    event_type           = Column(String(20),  nullable=False)
    venue                = Column(String(200), nullable=True)
    location             = Column(String(255), nullable=True)
    # 'free' | 'paid'; ticket_price only for paid events
    ticket_type          = Column(String(10),  default="free", nullable=False)
    ticket_price         = Column(Float,       nullable=True)
    total_tickets        = Column(Integer,     nullable=False)
    # Running counter of issued tickets (pending + confirmed)
    tickets_sold         = Column(Integer,     default=0, nullable=False)
    platform_fee_percent = Column(Float,       default=8.0, nullable=False)
    # 'organizer' | 'buyer'
    fee_bearer           = Column(String(20),  default="organizer", nullable=False)
    image_url            = Column(String(500), nullable=True)
    banner_url           = Column(String(500), nullable=True)
    created_at           = Column(DateTime,    default=utcnow, nullable=False)

    organizer = relationship("User", back_populates="events")
    tickets   = relationship("Ticket", back_populates="event")

    @property
    def organizer_name(self) -> str:
        return self.organizer.name if self.organizer else ""


class Ticket(Base):
    __tablename__ = "tickets"

    id                = Column(Integer,     primary_key=True, autoincrement=True)
    event_id          = Column(Integer,     ForeignKey("events.id"), nullable=False, index=True)
    user_id           = Column(Integer,     ForeignKey("users.id"), nullable=False, index=True)
    ticket_code       = Column(String(40),  unique=True, nullable=False)
    # Gateway reference; the webhook looks tickets up by exact match
    payment_reference = Column(String(100), unique=True, nullable=False, index=True)
    amount_paid       = Column(Float,       default=0.0, nullable=False)
    # 'pending' | 'confirmed'
    status            = Column(String(20),  default="pending", nullable=False, index=True)
    purchase_date     = Column(DateTime,    default=utcnow, nullable=False)

    event = relationship("Event", back_populates="tickets")
    user  = relationship("User", back_populates="tickets")


# ── KYC ──────────────────────────────────────────────────────────────────────
class KycRequest(Base):
    """Identity and bank details an organizer submits; one row per user, updated on resubmission."""
    __tablename__ = "kyc_requests"

    id                  = Column(Integer,     primary_key=True, autoincrement=True)
    user_id             = Column(Integer,     ForeignKey("users.id"), unique=True, nullable=False)
    kyc_type            = Column(String(20),  nullable=False)

    # Personal
    full_name           = Column(String(200), nullable=True)
    date_of_birth       = Column(Date,        nullable=True)
    phone_number        = Column(String(30),  nullable=True)
    address             = Column(Text,        nullable=True)
    id_type             = Column(String(50),  nullable=True)
    id_number           = Column(String(100), nullable=True)
    id_document_url     = Column(String(500), nullable=True)

    # Business
    business_name       = Column(String(200), nullable=True)
    business_reg_number = Column(String(100), nullable=True)
    business_address    = Column(Text,        nullable=True)
    business_type       = Column(String(100), nullable=True)
    cac_document_url    = Column(String(500), nullable=True)

    # Bank
    bank_name           = Column(String(100), nullable=True)
    account_number      = Column(String(30),  nullable=True)
    account_name        = Column(String(200), nullable=True)

    created_at          = Column(DateTime,    default=utcnow, nullable=False)
    updated_at          = Column(DateTime,    default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="kyc_request")
