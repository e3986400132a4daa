from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from ancestortree.database import Base


class Media(Base):
    __tablename__ = "media"

    id = Column(Integer, primary_key=True, index=True)

    person_id = Column(
        String,
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True
    )

    event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="SET NULL"),
        nullable=True
    )

    # File info
    file_path = Column(String, nullable=False)
    file_type = Column(String, nullable=False)  # image / video / document
    caption = Column(String, nullable=True)

    uploaded_by = Column(String, nullable=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow)
