# ancestortree/schemas/person_schema.py
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_serializer, field_validator


class PersonBase(BaseModel):
    display_name: Optional[str] = Field(default=None, max_length=100)
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    surname: Optional[str] = None
    pen_name: Optional[str] = Field(default=None, max_length=100)
    taboo_name: Optional[str] = Field(default=None, max_length=100)

    gender: Optional[Literal[1, 2]] = None
    generation: Optional[int] = Field(default=None, ge=1, le=20)
    chi: Optional[int] = None

    birth_date: Optional[str] = None
    birth_year: Optional[int] = None
    birth_place: Optional[str] = Field(default=None, max_length=200)

    death_date: Optional[str] = None
    death_year: Optional[int] = None
    death_place: Optional[str] = Field(default=None, max_length=200)
    death_lunar: Optional[str] = None

    is_living: Optional[bool] = None
    is_patrilineal: Optional[bool] = None

    # Contact
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    zalo: Optional[str] = Field(default=None, max_length=20)
    facebook: Optional[HttpUrl] = None
    address: Optional[str] = Field(default=None, max_length=500)
    hometown: Optional[str] = Field(default=None, max_length=200)

    # Bio
    occupation: Optional[str] = Field(default=None, max_length=200)
    biography: Optional[str] = Field(default=None, max_length=5000)
    notes: Optional[str] = Field(default=None, max_length=2000)
    avatar_url: Optional[HttpUrl] = None

    # 0 = public, 1 = members, 2 = private
    privacy_level: Optional[Literal[0, 1, 2]] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        # Forms submit '' for cleared inputs
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_serializer("facebook", "avatar_url")
    def url_to_str(self, value):
        # Columns hold plain strings
        return str(value) if value is not None else None


class PersonCreate(PersonBase):
    handle: str = Field(pattern=r"^[a-z0-9-]+$", min_length=1)
    display_name: str = Field(min_length=1, max_length=100)
    gender: Literal[1, 2] = 1
    generation: int = Field(default=1, ge=1, le=20)
    is_living: bool = True
    is_patrilineal: bool = True

    user_id: Optional[str] = None


class PersonUpdate(PersonBase):
    @field_validator(
        "display_name",
        "gender",
        "generation",
        "is_living",
        "is_patrilineal",
        "privacy_level",
    )
    @classmethod
    def not_cleared(cls, value):
        # Only runs for fields present in the body; these columns are NOT NULL
        if value is None:
            raise ValueError("This field cannot be cleared")
        return value
