from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from ancestortree.database import Base


class Child(Base):
    """
    Links a person to the family they were born (or adopted) into.
    """

    __tablename__ = "children"

    id = Column(Integer, primary_key=True)

    family_id = Column(
        Integer,
        ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False,
    )

    person_id = Column(
        String,
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
    )

    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
