"""
VocabList Backend - Pydantic Record & API Schemas
===================================================

What:  Pydantic models for stored records (lists, items, share codes, words)
       and for the HTTP request/response contract.
How:   Python fields are snake_case; documents and JSON payloads use
       camelCase aliases generated by `to_camel`. `to_document()` produces the
       body written to the document store, `model_validate()` reads it back.
Who:   Services build and return these; route handlers use them as
       request bodies and response models.

Design Decision:
    Stored records and API responses share models. Documents are already the
    public shape of a list (the original clients read them directly), so a
    second set of response models would only copy fields.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class Visibility(str, Enum):
    PRIVATE = "private"
    PUBLIC = "public"


class TargetStatus(str, Enum):
    """Outcome of adding an item to one target list."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    ERROR = "error"


_DATETIME = TypeAdapter(datetime)


def to_timestamp(value: datetime) -> str:
    """Format a datetime exactly as `to_document()` stores it (UTC as 'Z')."""
    return _DATETIME.dump_python(value, mode="json")


class CamelModel(BaseModel):
    """Base for models stored as camelCase documents."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe document body (camelCase keys, ISO datetimes)."""
        return self.model_dump(by_alias=True, mode="json")


# ══════════════════════════════════════════════════════════════════════════
# Stored Records
# ══════════════════════════════════════════════════════════════════════════


class CoverImage(CamelModel):
    """Descriptor of an uploaded cover image."""

    url: str = Field(description="Public URL of the image")
    asset_id: str = Field(description="Blob store id, used to delete the image")


class WordList(CamelModel):
    """
    A named list of vocabulary items owned by one user.

    word_count is a cached counter kept in step with the items subcollection
    by atomic increments; ItemStore.list_items() can reconcile it.
    """

    list_id: str
    list_name: str
    description: Optional[str] = None
    list_language: List[str] = Field(default_factory=list)
    visibility: Visibility = Visibility.PRIVATE
    is_default: bool = False
    imported: bool = False
    imported_from: Optional[str] = Field(default=None, description="Source owner id")
    imported_at: Optional[datetime] = None
    word_count: int = 0
    cover_image: Optional[CoverImage] = None
    created_at: datetime
    updated_at: datetime


class ListItem(CamelModel):
    """One vocabulary entry inside a list, keyed by word_id."""

    word_id: str
    original_word: str
    translated_word: str
    translated_lang: str
    source_asset_id: Optional[str] = Field(
        default=None, description="Capture the word came from; null for imported copies"
    )
    added_at: datetime
    note: Optional[str] = None


class SharedCode(CamelModel):
    """A share token mapping to (owner, list). Soft-deleted, never cleared."""

    shared_id: str
    shared_code: str
    owner_id: str
    list_id: str
    share_url: str = Field(alias="shareURL")
    is_deleted: bool = False
    created_at: datetime
    deleted_at: Optional[datetime] = None


class Word(CamelModel):
    """Global word record (read-only here)."""

    word_id: str
    original_word: str
    translations: Dict[str, str] = Field(default_factory=dict)


class TranslationMatch(CamelModel):
    word_id: str
    translated_word: str


# ══════════════════════════════════════════════════════════════════════════
# Operation Results
# ══════════════════════════════════════════════════════════════════════════


class TargetOutcome(CamelModel):
    list_id: str
    status: TargetStatus
    message: Optional[str] = None


class AddItemSummary(CamelModel):
    success_count: int
    failed_count: int
    lang_item_added: bool


class AddItemResult(CamelModel):
    """
    What:  Result of MultiListInserter.add_item().
    Who:   Returned by POST /api/items with HTTP 200 even when some targets failed.

    Per-target failures are data, not errors: the client shows which lists
    received the word and which did not.
    """

    word_id: str
    original_word: str
    translated_word: str
    translated_lang: str
    language_list_id: str
    targets: List[TargetOutcome]
    summary: AddItemSummary


class ShareResult(CamelModel):
    shared_id: str
    shared_code: str
    share_url: str = Field(alias="shareURL")
    list_id: str


class SharedListView(CamelModel):
    """A resolved share token: who owns the list, the list and its items."""

    owner_id: str
    word_list: WordList = Field(alias="list")
    items: List[ListItem]


class ListDetail(CamelModel):
    """A list together with its items (GET /api/lists/{listId})."""

    word_list: WordList = Field(alias="list")
    items: List[ListItem]


class ImportResult(CamelModel):
    word_list: WordList = Field(alias="list")
    items_imported: int
    source_owner_id: str


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateListRequest(CamelModel):
    """Blank names are rejected by ListStore (400), not by the schema (422)."""

    list_name: str = Field(max_length=100, description="Display name; also derives the list id")
    description: Optional[str] = Field(default=None, max_length=500)
    list_language: List[str] = Field(default_factory=list)


class UpdateListRequest(CamelModel):
    list_name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class AddItemRequest(CamelModel):
    """
    Body of POST /api/items.

    The target count is checked by MultiListInserter so that an oversized
    request fails with 400 before any store access.
    """

    word_id: str
    source_asset_id: str = Field(description="Capture id the word was translated from")
    target_list_ids: List[str] = Field(default_factory=list)


class RevokeResponse(CamelModel):
    list_id: str
    revoked: int


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "list with ID 'travel_u1' was not found",
            "details": {"resource": "list", "resource_id": "travel_u1"},
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
