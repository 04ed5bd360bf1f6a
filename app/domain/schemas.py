from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import date, datetime


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================
# Request Schemas
# ============================================

class PassRequest(_CamelModel):
    """Pass issuance form. Fields are checked for presence by the route."""
    name: Optional[str] = None
    phone: Optional[str] = None
    meeting_place: Optional[str] = None
    meeting_date: Optional[str] = None

    def is_complete(self) -> bool:
        return all(
            value and value.strip()
            for value in (self.name, self.phone, self.meeting_place, self.meeting_date)
        )


class SetDefaultRequest(_CamelModel):
    password: Optional[str] = None
    event_date: Optional[str] = None
    place: Optional[str] = None


class LocaleUpdate(BaseModel):
    locale: str


# ============================================
# Record Schemas
# ============================================

class Visitor(BaseModel):
    """A persisted pass submission. Never mutated after insert."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: str
    meeting_place: str
    meeting_date: datetime
    serial_number: str = Field(..., pattern=r"^CARD-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")
    created_at: Optional[datetime] = None


class DefaultPlace(BaseModel):
    event_date: date
    place: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================
# Response Schemas
# ============================================

class FormPrefillResponse(_CamelModel):
    locale: str
    default_place: Optional[str] = None
    default_region: str
    phone_placeholder: str


class SuccessResponse(BaseModel):
    success: bool = True
