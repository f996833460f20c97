from sqlalchemy import Column, Integer, String, JSON, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from dropx.models.user import Base


class UserActivity(Base):
    __tablename__ = "user_activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    activity_type = Column(String(50), nullable=False)
    description = Column(String(500))
    ip_address = Column(String(64))
    user_agent = Column(String(255))
    details = Column("metadata", JSON().with_variant(JSONB, "postgresql"))
    created_at = Column(DateTime, default=datetime.utcnow)
