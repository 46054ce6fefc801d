# pocketledger/models/wallet.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, Numeric
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from pocketledger.core.database import Base
from pocketledger.utils.timeutils import utcnow

class Wallet(Base):
    __tablename__ = "wallets"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=50), nullable=False)
    # Opening balance given at creation; never changes afterwards
    initial_balance = Column(Numeric(14, 2), nullable=False, default=0)
    # Cached: initial_balance + effects of completed transactions.
    # Written only by pocketledger.services.ledger.apply_effect
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    currency = Column(String(length=10), nullable=False, default="VND")
    icon = Column(String(length=20), nullable=True)
    color = Column(String(length=20), nullable=True)
    is_default = Column(Boolean(), default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Wallet name={self.name} balance={self.balance} user_id={self.user_id}>"
