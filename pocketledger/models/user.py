# pocketledger/models/user.py
import uuid
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from pocketledger.core.database import Base
from pocketledger.utils.timeutils import utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(length=255), unique=True, index=True, nullable=False)
    name = Column(String(length=100), nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<User email={self.email}>"
