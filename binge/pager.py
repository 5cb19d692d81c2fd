from .client import BingeClient
from .config import _log, _log_search
from .errors import RemoteError
from .models import CatalogItem, PageResult, SearchQuery
from .state import SearchSession


def merge_items(existing: list[CatalogItem], incoming: list[CatalogItem]) -> list[CatalogItem]:
    """Liitä uudet rivit perään; (id, media_type) -duplikaatit pudotetaan, järjestys säilyy."""
    seen = {item.key for item in existing}
    merged = list(existing)
    for item in incoming:
        if item.key not in seen:
            seen.add(item.key)
            merged.append(item)
    return merged


class SearchPager:
    """
    Yhden aktiivisen haun sivutus.

    Jokainen start_query()/clear() kasvattaa epochia. Vastaus sovelletaan vain
    jos sen pyynnön epoch on yhä nykyinen — muuten se (ja sen virhe) hylätään.
    Näin vain viimeisimmän kyselyn tulokset näkyvät, vaikka vastaukset
    saapuisivat missä järjestyksessä tahansa.
    """

    def __init__(self, client: BingeClient):
        self._client = client
        self._session = SearchSession()
        self._epoch = 0

    @property
    def session(self) -> SearchSession:
        return self._session.model_copy(update={"items": list(self._session.items)})

    def clear(self) -> None:
        self._epoch += 1
        self._session = SearchSession()

    async def start_query(self, query: SearchQuery) -> bool:
        self._epoch += 1
        self._session = SearchSession(query=query, page=1, status="loading")
        return await self._fetch(self._epoch, query, 1)

    async def load_more(self) -> bool:
        session = self._session
        if not session.can_load_more:
            return False
        session.status = "loading"
        session.error = None
        return await self._fetch(self._epoch, session.query, session.page + 1)

    async def _fetch(self, epoch: int, query: SearchQuery, page: int) -> bool:
        try:
            result = await self._client.search(query.text, page=page, scope=query.scope)
        except RemoteError as e:
            if epoch != self._epoch:
                _log("HAKU VANHENTUNUT (virhe)", f"epoch={epoch} nykyinen={self._epoch} query={query.text!r}\n{e}")
                return False
            self._session.status = "error"
            self._session.error = str(e)
            return False

        if epoch != self._epoch:
            _log("HAKU VANHENTUNUT", f"epoch={epoch} nykyinen={self._epoch} query={query.text!r} page={page}")
            return False
        self._apply(query, page, result)
        return True

    def _apply(self, query: SearchQuery, page: int, result: PageResult) -> None:
        incoming = [item for item in result.results if query.filters.accepts(item)]
        session = self._session
        session.items = merge_items([] if page == 1 else session.items, incoming)
        session.page = page
        session.total_pages = result.total_pages
        session.status = "idle"
        session.error = None
        _log_search(query.text, query.scope, page, result.total_pages, len(incoming))
