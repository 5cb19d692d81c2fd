import math
from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .config import IMAGE_BASE

MediaType = Literal["movie", "tv"]
Scope = Literal["all", "movies", "tv"]
SessionStatus = Literal["idle", "loading", "error"]
WatchlistFilter = Literal["all", "watched", "unwatched"]

# Hakualue → mediatyyppi, jota käytetään kun rivi ei kerro omaansa
SCOPE_MEDIA_TYPE: dict[str, MediaType] = {"all": "movie", "movies": "movie", "tv": "tv"}


class CatalogItem(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    media_type: MediaType
    title: str = ""
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    runtime: int | None = None
    genre_ids: tuple[int, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data):
        # Sarjoilla name/first_air_date, elokuvilla title/release_date.
        # Go-backend lähettää puuttuvat merkkijonot tyhjinä ja listat nullina.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["title"] = data.get("title") or data.get("name") or ""
        data["release_date"] = data.get("release_date") or data.get("first_air_date") or None
        data["overview"] = data.get("overview") or ""
        data["genre_ids"] = data.get("genre_ids") or ()
        for key in ("poster_path", "backdrop_path"):
            if not data.get(key):
                data[key] = None
        if not data.get("runtime"):
            data["runtime"] = None
        return data

    @property
    def key(self) -> tuple[int, str]:
        return (self.id, self.media_type)

    @property
    def year(self) -> int | None:
        if not self.release_date or len(self.release_date) < 4:
            return None
        try:
            return int(self.release_date[:4])
        except ValueError:
            return None

    def poster_url(self, size: str = "w500") -> str | None:
        if not self.poster_path:
            return None
        return f"{IMAGE_BASE}{size}{self.poster_path}"


class SearchFilters(BaseModel):
    model_config = ConfigDict(frozen=True)

    year_min: int | None = None
    year_max: int | None = None
    rating_min: float | None = None
    rating_max: float | None = None
    runtime_min: int | None = None
    runtime_max: int | None = None

    @classmethod
    def from_form(cls, **fields) -> "SearchFilters":
        """Lomakkeen kentät merkkijonoina: tyhjä tai ei-numeerinen = ei rajaa."""
        parsed = {}
        for name, raw in fields.items():
            if name not in cls.model_fields:
                raise TypeError(f"tuntematon suodatin: {name}")
            if raw is None:
                continue
            text = str(raw).strip()
            if not text:
                continue
            try:
                number = float(text)
            except ValueError:
                continue
            if not math.isfinite(number):
                continue
            parsed[name] = number if name.startswith("rating") else int(number)
        return cls(**parsed)

    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())

    def accepts(self, item: CatalogItem) -> bool:
        # Rivi, jolta kenttä puuttuu, menee läpi
        checks = (
            (item.year, self.year_min, self.year_max),
            (item.vote_average, self.rating_min, self.rating_max),
            (item.runtime, self.runtime_min, self.runtime_max),
        )
        for value, low, high in checks:
            if value is None:
                continue
            if low is not None and value < low:
                return False
            if high is not None and value > high:
                return False
        return True


class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    scope: Scope = "all"
    filters: SearchFilters = Field(default_factory=SearchFilters)


class PageResult(BaseModel):
    results: list[CatalogItem] = Field(default_factory=list)
    page: int = 1
    total_pages: int = Field(default=0, ge=0)
    total_results: int = 0


class Genre(BaseModel):
    id: int
    name: str


class WatchlistEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_id: int = Field(validation_alias=AliasChoices("content_id", "contentId"))
    content_type: MediaType = Field(validation_alias=AliasChoices("content_type", "contentType"))
    is_watched: bool = Field(default=False, validation_alias=AliasChoices("is_watched", "isWatched"))
    added_at: datetime | None = Field(default=None, validation_alias=AliasChoices("added_at", "addedAt"))
    watched_at: datetime | None = Field(default=None, validation_alias=AliasChoices("watched_at", "watchedAt"))
    details: CatalogItem | None = None

    @model_validator(mode="before")
    @classmethod
    def _details_from_entry(cls, data):
        # Detaljihaku ei palauta media_typea; otetaan se rivin content_typestä
        if not isinstance(data, dict):
            return data
        details = data.get("details")
        if not isinstance(details, dict):
            return data
        content_id = data.get("content_id", data.get("contentId"))
        content_type = data.get("content_type", data.get("contentType"))
        details = {
            **details,
            "id": details.get("id") or content_id,
            "media_type": details.get("media_type") or content_type,
        }
        return {**data, "details": details}

    @property
    def key(self) -> tuple[int, str]:
        return (self.content_id, self.content_type)

    @property
    def title(self) -> str:
        if self.details and self.details.title:
            return self.details.title
        return f"{self.content_type} {self.content_id}"


class WatchlistStats(BaseModel):
    total: int = 0
    watched: int = 0
    unwatched: int = 0
