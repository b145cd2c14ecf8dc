"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, UniqueConstraint

from regdesk.core.timeutils import utcnow
from regdesk.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True)
    phone = Column(String(20))
    role = Column(String(20), nullable=False, default="data_entry")
    status = Column(String(20), nullable=False, default="active")
    last_login_at = Column(DateTime)
    last_login_ip = Column(String(45))
    remarks = Column(String(500))
    created_by = Column(String(36))
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, onupdate=utcnow)


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    team_name = Column(String(100), nullable=False, index=True)
    leader_name = Column(String(50), nullable=False)
    leader_phone = Column(String(20), nullable=False, index=True)
    leader_email = Column(String(100))
    leader_organization = Column(String(100))
    members = Column(JSON, nullable=False, default=list)
    status = Column(String(20), default="pending", index=True)
    payment_status = Column(String(20), nullable=False, default="unpaid")
    total_amount_cents = Column(Integer, nullable=False, default=0)
    paid_amount_cents = Column(Integer, nullable=False, default=0)
    paid_at = Column(DateTime)
    reviewed_at = Column(DateTime)
    remarks = Column(Text)
    reject_reason = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, onupdate=utcnow)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_number = Column(String(40), unique=True, nullable=False, index=True)
    registration_id = Column(String(36), index=True)
    team_name = Column(String(100))
    payer_name = Column(String(50))
    payer_phone = Column(String(20))
    payer_email = Column(String(100))
    payment_method = Column(String(20), nullable=False, default="other")
    amount_cents = Column(Integer, nullable=False)
    status = Column(String(30), default="pending", index=True)
    transaction_id = Column(String(64), unique=True)
    paid_at = Column(DateTime)
    refunded_at = Column(DateTime)
    remarks = Column(String(500))
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, onupdate=utcnow)


class PageView(Base):
    __tablename__ = "page_views"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    date = Column(String(10), unique=True, nullable=False, index=True)
    count = Column(Integer, nullable=False, default=0)
    unique_visitors = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)


class PageVisitor(Base):
    """One row per distinct visitor and day."""

    __tablename__ = "page_visitors"
    __table_args__ = (UniqueConstraint("date", "visitor", name="uq_page_visitors_date_visitor"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    date = Column(String(10), nullable=False, index=True)
    visitor = Column(String(64), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
