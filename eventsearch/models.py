from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, List, Literal, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

SuggestionType = Literal["category", "season", "event", "place", "history"]
SearchType = Literal["event", "place", "category", "season"]


class HistoryRecord(BaseModel):
    """One row of public.search_history (one per distinct term and user)."""

    id: Optional[str] = None
    user_id: Optional[str] = None

    search_term: str = Field(min_length=1)
    search_type: SearchType = "event"
    search_count: int = Field(default=1, ge=0)
    last_searched_at: datetime
    created_at: Optional[datetime] = None


class LocalEvent(BaseModel):
    id: str
    title: str = Field(min_length=1)
    location: Optional[str] = None
    attendee_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("attendee_count", "attendees", "attendeeCount"),
    )


class PlaceResult(BaseModel):
    display_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("display_name", "displayName", "description"),
    )
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    type: str = "place"
    importance: float = 0.0


class Suggestion(BaseModel):
    text: str
    type: SuggestionType
    score: float = Field(ge=0)
    search_count: Optional[int] = None


class GroupedSuggestions(BaseModel):
    history: List[Suggestion] = Field(default_factory=list)
    categories: List[Suggestion] = Field(default_factory=list)
    events: List[Suggestion] = Field(default_factory=list)
    places: List[Suggestion] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.history or self.categories or self.events or self.places)


M = TypeVar("M", bound=BaseModel)


def coerce_records(model: Type[M], items: Iterable[Any] | None) -> List[M]:
    """
    Validate collaborator records into *model*, preserving order.

    Instances of *model* pass through untouched. Anything that fails
    validation is skipped with a warning; this never raises.
    """
    out: List[M] = []
    if items is None or isinstance(items, (str, bytes, dict)):
        if items:
            logger.warning("[models] expected a sequence of %s, got %s", model.__name__, type(items).__name__)
        return out
    try:
        iterator = iter(items)
    except TypeError:
        logger.warning("[models] expected a sequence of %s, got %s", model.__name__, type(items).__name__)
        return out

    for idx, item in enumerate(iterator):
        if isinstance(item, model):
            out.append(item)
            continue
        try:
            out.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "[models] skipping malformed %s at index=%d: %s",
                model.__name__, idx, e.errors(include_url=False),
            )
    return out
