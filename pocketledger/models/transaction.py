# pocketledger/models/transaction.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Numeric
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pocketledger.core.database import Base
from pocketledger.utils.timeutils import utcnow

class TransactionType(str, enum.Enum):
    income = "income"
    expense = "expense"

class TransactionStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    wallet_id = Column(PG_UUID(as_uuid=True), ForeignKey("wallets.id"), nullable=False, index=True)
    category_id = Column(PG_UUID(as_uuid=True), ForeignKey("categories.id"), nullable=False, index=True)
    type = Column(Enum(TransactionType, name="transaction_type"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String(length=255), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    # Only completed transactions count towards the wallet balance
    status = Column(Enum(TransactionStatus, name="transaction_status"), nullable=False, default=TransactionStatus.completed)
    # Deferred income: when the work was done and when the money arrived
    work_date = Column(DateTime(timezone=True), nullable=True)
    received_date = Column(DateTime(timezone=True), nullable=True)

    # Provenance of system-generated rows. No foreign keys: the references
    # outlive the goal or contribution they point at.
    source_goal_id = Column(PG_UUID(as_uuid=True), nullable=True, index=True)
    source_contribution_id = Column(PG_UUID(as_uuid=True), nullable=True)
    # Other half of a wallet transfer
    paired_transaction_id = Column(PG_UUID(as_uuid=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    category = relationship("Category", lazy="joined")

    def __repr__(self):
        return f"<Transaction type={self.type} amount={self.amount} status={self.status} wallet_id={self.wallet_id}>"
