from pydantic import BaseModel, Field

from .models import CatalogItem, SearchQuery, SessionStatus


class SearchSession(BaseModel):
    # Tyhjennetty tila: ei kyselyä, page=0
    query: SearchQuery | None = None
    page: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)
    # Saapumisjärjestyksessä, (id, media_type) -duplikaatit poistettu
    items: list[CatalogItem] = Field(default_factory=list)
    status: SessionStatus = "idle"
    error: str | None = None

    @property
    def can_load_more(self) -> bool:
        return self.query is not None and self.status != "loading" and self.page < self.total_pages
