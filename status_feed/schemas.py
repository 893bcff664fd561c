"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.

Every response body is one of three envelopes:

  DataEnvelope       { "data": <payload> }
  PaginatedEnvelope  { "meta": {page, page_size, total_count}, "data": [...] }
  ErrorEnvelope      { "error": {code, message | messages} }
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


# ──────────────────────────── Status updates ──────────────────────────────

class StatusUpdateCreate(BaseModel):
    # Optional at the schema level so the store reports every violated rule
    body: Optional[str] = None
    mood: Optional[str] = None
    status: Optional[str] = None


class StatusUpdatePatch(BaseModel):
    body: Optional[str] = None
    mood: Optional[str] = None
    status: Optional[str] = None
    # Attached to any transition this update records
    reason: Optional[str] = Field(None, max_length=1000)

    def changed_fields(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"reason"})


class StatusUpdatePayload(BaseModel):
    id: str
    body: str
    mood: str
    status: Optional[str]
    likes_count: int
    created_at: str
    updated_at: str


class LikesPayload(BaseModel):
    id: str
    likes_count: int


# ──────────────────────────── Transitions ─────────────────────────────────

class TransitionDisplay(BaseModel):
    from_: Optional[str] = Field(None, alias="from")
    to: str

    class Config:
        populate_by_name = True


class StatusChangePayload(BaseModel):
    id: int
    status_update_id: str
    field: str
    from_: Optional[str] = Field(None, alias="from")
    to: str
    display: TransitionDisplay
    reason: Optional[str]
    changed_at: str

    class Config:
        populate_by_name = True


# ──────────────────────────── Comments ────────────────────────────────────

class CommentCreate(BaseModel):
    body: Optional[str] = None


class CommentPayload(BaseModel):
    id: int
    status_update_id: str
    body: str
    created_at: str
    updated_at: str


# ──────────────────────────── Reactions ───────────────────────────────────

class ReactionToggle(BaseModel):
    kind: Optional[str] = None
    actor_identifier: Optional[str] = None


class ReactionPayload(BaseModel):
    id: int
    status_update_id: str
    kind: str
    actor_identifier: str
    created_at: str


class ReactionSummary(BaseModel):
    kind: str
    count: int
    actors: list[str]


class ToggledOff(BaseModel):
    toggled: bool = False


# ──────────────────────────── Envelopes ───────────────────────────────────

class HealthPayload(BaseModel):
    status: str
    service: str


class PageMeta(BaseModel):
    page: int
    page_size: int
    total_count: int


class DataEnvelope(BaseModel, Generic[T]):
    data: T


class PaginatedEnvelope(BaseModel, Generic[T]):
    meta: PageMeta
    data: list[T]


class ErrorBody(BaseModel):
    code: str
    message: Optional[str] = None
    messages: Optional[list[str]] = None


class ErrorEnvelope(BaseModel):
    error: ErrorBody
