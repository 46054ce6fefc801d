# pocketledger/models/category.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from pocketledger.core.database import Base
from pocketledger.models.transaction import TransactionType
from pocketledger.utils.timeutils import utcnow

class CategoryKind(str, enum.Enum):
    user = "user"
    # System categories, created lazily and managed by the services layer
    savings = "savings"
    goal_refund = "goal_refund"
    transfer = "transfer"

class Category(Base):
    __tablename__ = "categories"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=50), nullable=False)
    # Fixed at creation
    type = Column(Enum(TransactionType, name="transaction_type"), nullable=False)
    kind = Column(Enum(CategoryKind, name="category_kind"), nullable=False, default=CategoryKind.user)
    icon = Column(String(length=20), nullable=True)
    color = Column(String(length=20), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def is_system(self) -> bool:
        return self.kind != CategoryKind.user

    def __repr__(self):
        return f"<Category name={self.name} type={self.type} user_id={self.user_id}>"
