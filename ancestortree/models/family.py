from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from ancestortree.database import Base


class Family(Base):
    """
    A partner/couple unit.
    Children attach to the family through `Child` rows.
    """

    __tablename__ = "families"

    id = Column(Integer, primary_key=True)

    father_id = Column(String, ForeignKey("people.id"), nullable=True)
    mother_id = Column(String, ForeignKey("people.id"), nullable=True)

    marriage_date = Column(String, nullable=True)
    marriage_place = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
