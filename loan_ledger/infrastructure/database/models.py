"""SQLAlchemy ORM models for the ledger collections"""

from sqlalchemy import Column, String, Float, DateTime, Integer, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class UserRecord(Base):
    """Borrower or staff account"""

    __tablename__ = "users"

    username = Column(String(64), primary_key=True)
    seq = Column(Integer, nullable=False, default=0)
    password = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    role = Column(String(16), nullable=False)
    wallet = Column(Float, nullable=False, default=0.0)


class LoanRecord(Base):
    """Disbursed loan"""

    __tablename__ = "loans"

    id = Column(String(36), primary_key=True)
    seq = Column(Integer, nullable=False, default=0)
    borrower_username = Column(String(64), nullable=False, index=True)
    principal = Column(Float, nullable=False)
    balance_remaining = Column(Float, nullable=False)
    tenor_months = Column(Integer, nullable=False)
    rate_percent = Column(Float, nullable=False)
    monthly_payment = Column(Float, nullable=False)
    status = Column(String(16), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False)
    eligibility_snapshot = Column(JSON, nullable=True)

    actions = relationship(
        "LoanActionRecord",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="LoanActionRecord.seq",
    )


class LoanActionRecord(Base):
    """Audit trail entry on a loan"""

    __tablename__ = "loan_actions"

    id = Column(String(36), primary_key=True)
    loan_id = Column(String(36), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    seq = Column(Integer, nullable=False)
    action = Column(String(32), nullable=False)
    by = Column(String(64), nullable=False)
    at = Column(DateTime(timezone=True), nullable=False)
    note = Column(Text, nullable=False, default="")

    loan = relationship("LoanRecord", back_populates="actions")


class RepaymentRecord(Base):
    """Repayment ledger entry"""

    __tablename__ = "repayments"

    id = Column(String(36), primary_key=True)
    seq = Column(Integer, nullable=False, default=0)
    loan_id = Column(String(36), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    by = Column(String(64), nullable=False)


class SessionRecord(Base):
    """Current logged-in identity (at most one row)"""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False)
    role = Column(String(16), nullable=False)
    logged_in_at = Column(DateTime(timezone=True), nullable=False)
