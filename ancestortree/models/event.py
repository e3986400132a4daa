from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey

from ancestortree.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # gio (death anniversary) / hop_ho (clan gathering) / le_tet / other
    event_type = Column(String, nullable=False, default="gio")

    event_date = Column(String, nullable=True)
    event_lunar = Column(String, nullable=True)   # "DD/MM" lunar
    location = Column(String, nullable=True)
    recurring = Column(Boolean, nullable=False, default=True)

    # Visibility follows this person when set
    person_id = Column(
        String,
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True
    )

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
