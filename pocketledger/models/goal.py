# pocketledger/models/goal.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum, Numeric
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pocketledger.core.database import Base
from pocketledger.utils.timeutils import utcnow

class GoalStatus(str, enum.Enum):
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"

class Goal(Base):
    __tablename__ = "goals"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    description = Column(String(length=255), nullable=True)
    target_amount = Column(Numeric(14, 2), nullable=False)
    # Track how much is saved so far, updated by pocketledger.services.goals
    current_amount = Column(Numeric(14, 2), nullable=False, default=0)
    status = Column(Enum(GoalStatus, name="goal_status"), nullable=False, default=GoalStatus.in_progress)
    deadline = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Goal name={self.name} current={self.current_amount}/{self.target_amount} user_id={self.user_id}>"

class GoalContribution(Base):
    __tablename__ = "goal_contributions"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(PG_UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    wallet_id = Column(PG_UUID(as_uuid=True), ForeignKey("wallets.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    contribution_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    note = Column(String(length=255), nullable=True)
    # The savings expense that funded this contribution
    transaction_id = Column(PG_UUID(as_uuid=True), ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    goal = relationship("Goal", lazy="joined")

    def __repr__(self):
        return f"<GoalContribution goal_id={self.goal_id} amount={self.amount}>"
