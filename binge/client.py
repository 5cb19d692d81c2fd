import httpx
from pydantic import BaseModel, ValidationError

from .config import BINGE_API_BASE, REQUEST_TIMEOUT, _log
from .errors import Malformed, NetworkUnavailable, Timeout, classify_status
from .models import (
    SCOPE_MEDIA_TYPE,
    CatalogItem,
    Genre,
    MediaType,
    PageResult,
    Scope,
    WatchlistEntry,
)

_SEARCH_PATHS = {"all": "/search", "movies": "/search/movies", "tv": "/search/tv"}
_TRENDING_PATHS = {"all": "/trending", "movie": "/trending/movies", "tv": "/trending/tv"}
_GENRE_PATHS = {"movie": "movies", "tv": "tv"}


def _error_message(body, response: httpx.Response) -> str:
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return response.reason_phrase or response.text[:200]


def _validate(model: type[BaseModel], data, what: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise Malformed(f"{what}: {e.error_count()} virheellistä kenttää") from e


def _page(body: dict, media_type: MediaType, what: str) -> PageResult:
    """Listavastaus {results, total_pages} → PageResult. Rivit ilman media_typea saavat oletuksen."""
    if "results" not in body or "total_pages" not in body:
        raise Malformed(f"{what}: vastauksesta puuttuu results/total_pages")
    results = body["results"] or []
    if not isinstance(results, list):
        raise Malformed(f"{what}: results ei ole lista")
    rows = [
        {**row, "media_type": row.get("media_type") or media_type} if isinstance(row, dict) else row
        for row in results
    ]
    # Monihaun henkilörivit eivät ole katalogin sisältöä
    rows = [row for row in rows if not isinstance(row, dict) or row["media_type"] != "person"]
    return _validate(
        PageResult,
        {
            "results": rows,
            "page": body.get("page") or 1,
            "total_pages": body["total_pages"] or 0,
            "total_results": body.get("total_results") or 0,
        },
        what,
    )


class BingeClient:
    """
    BingeBase-API:n ohut asiakas. Yksi looginen operaatio = yksi HTTP-pyyntö.
    Ei tilaa kutsujen välillä (paitsi osoite ja aikaraja).
    """

    def __init__(
        self,
        base_url: str = BINGE_API_BASE,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "BingeClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, *, params: dict | None = None, json: dict | None = None) -> dict:
        try:
            r = await self._http.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            _log("BINGE TIMEOUT", f"{method} {path} params={params} json={json}\n{e!r}")
            raise Timeout(f"{method} {path} ylitti {self.timeout:g} s aikarajan") from e
        except httpx.RequestError as e:
            _log("BINGE VERKKOVIRHE", f"{method} {path} params={params} json={json}\n{e!r}")
            raise NetworkUnavailable(f"{method} {path}: {e.__class__.__name__}") from e

        try:
            body = r.json()
        except ValueError:
            body = None

        if r.is_error:
            message = _error_message(body, r)
            _log("BINGE HTTP-VIRHE", f"{method} {path} → {r.status_code}\n{message}")
            raise classify_status(r.status_code, message)

        if r.status_code == 204:
            return {}
        if not isinstance(body, dict):
            raise Malformed(f"{method} {path}: vastaus ei ole JSON-objekti", r.status_code)
        return body

    # ── Katalogi ────────────────────────────────────────────────

    async def search(self, query: str, page: int = 1, scope: Scope = "all") -> PageResult:
        body = await self._request("GET", _SEARCH_PATHS[scope], params={"query": query, "page": page})
        return _page(body, SCOPE_MEDIA_TYPE[scope], f"search {scope}")

    async def get_details(self, id: int, media_type: MediaType) -> CatalogItem:
        endpoint = f"/movie/{id}" if media_type == "movie" else f"/tv/{id}"
        body = await self._request("GET", endpoint)
        data = body.get("data")
        if not isinstance(data, dict):
            raise Malformed(f"{endpoint}: vastauksesta puuttuu data")
        return _validate(CatalogItem, {**data, "id": data.get("id") or id, "media_type": media_type}, endpoint)

    async def trending(self, media_type: str = "all", page: int = 1) -> PageResult:
        body = await self._request("GET", _TRENDING_PATHS[media_type], params={"page": page})
        return _page(body, "tv" if media_type == "tv" else "movie", f"trending {media_type}")

    async def genres(self) -> list[Genre]:
        body = await self._request("GET", "/genres")
        data = body.get("data", body.get("genres"))
        if not isinstance(data, list):
            raise Malformed("/genres: vastauksesta puuttuu genrelista")
        return [_validate(Genre, g, "/genres") for g in data]

    async def genre_content(self, genre_id: int, media_type: MediaType, page: int = 1) -> PageResult:
        endpoint = f"/genres/{genre_id}/{_GENRE_PATHS[media_type]}"
        body = await self._request("GET", endpoint, params={"page": page})
        return _page(body, media_type, endpoint)

    async def health(self) -> dict:
        return await self._request("GET", "/health")

    # ── Katselulista ────────────────────────────────────────────

    async def get_watchlist(self, user_id: str) -> list[WatchlistEntry]:
        body = await self._request("GET", "/watchlist", params={"user_id": user_id})
        if "data" not in body:
            raise Malformed("/watchlist: vastauksesta puuttuu data")
        rows = body["data"] or []
        if not isinstance(rows, list):
            raise Malformed("/watchlist: data ei ole lista")
        return [_validate(WatchlistEntry, row, "/watchlist") for row in rows]

    async def add_to_watchlist(self, user_id: str, content_id: int, content_type: MediaType) -> None:
        await self._request(
            "POST",
            "/watchlist",
            json={"user_id": user_id, "content_id": content_id, "content_type": content_type},
        )

    async def remove_from_watchlist(self, user_id: str, content_id: int, content_type: MediaType) -> None:
        await self._request(
            "DELETE",
            "/watchlist",
            params={"user_id": user_id, "content_id": content_id, "content_type": content_type},
        )

    async def mark_watched(self, user_id: str, content_id: int, content_type: MediaType, is_watched: bool) -> None:
        await self._request(
            "PUT",
            "/watchlist",
            json={
                "user_id": user_id,
                "content_id": content_id,
                "content_type": content_type,
                "is_watched": is_watched,
            },
        )
