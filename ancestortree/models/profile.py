import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime

from ancestortree.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    # Supabase Auth user id (JWT "sub")
    user_id = Column(String, unique=True, nullable=False, index=True)

    email = Column(String, nullable=True)
    full_name = Column(String, nullable=True)

    # member / admin
    role = Column(String, nullable=False, default="member")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
