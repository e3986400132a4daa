import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text

from ancestortree.database import Base


# Reachability fields that identify a living person
CONTACT_FIELDS = ("phone", "email", "zalo", "facebook", "address")

# Narrative fields reserved for signed-in members
MEMBER_ONLY_FIELDS = ("biography", "notes")


class Person(Base):
    __tablename__ = "people"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    # Account that represents this person, if any ("self" edits)
    user_id = Column(String, nullable=True, index=True)

    handle = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    middle_name = Column(String, nullable=True)
    surname = Column(String, nullable=True)
    pen_name = Column(String, nullable=True)
    taboo_name = Column(String, nullable=True)

    # 1 = male, 2 = female
    gender = Column(Integer, nullable=False, default=1)

    generation = Column(Integer, nullable=False, default=1)
    chi = Column(Integer, nullable=True)

    # -------------------------------------------------------
    # Birth / death
    # -------------------------------------------------------
    birth_date = Column(String, nullable=True)
    birth_year = Column(Integer, nullable=True)
    birth_place = Column(String, nullable=True)

    death_date = Column(String, nullable=True)
    death_year = Column(Integer, nullable=True)
    death_place = Column(String, nullable=True)
    death_lunar = Column(String, nullable=True)   # "DD/MM" lunar

    is_living = Column(Boolean, nullable=False, default=True)
    is_patrilineal = Column(Boolean, nullable=False, default=True)

    # -------------------------------------------------------
    # Contact bundle
    # -------------------------------------------------------
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    zalo = Column(String, nullable=True)
    facebook = Column(String, nullable=True)
    address = Column(String, nullable=True)

    hometown = Column(String, nullable=True)
    occupation = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)

    biography = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # 0 = public, 1 = members only, 2 = private
    privacy_level = Column(Integer, nullable=False, default=1, server_default="1")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
