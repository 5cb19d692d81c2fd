from .config import DEBOUNCE_SECONDS
from .debounce import QueryDebouncer
from .models import Scope, SearchFilters
from .pager import SearchPager
from .state import SearchSession


class LiveSearch:
    """Hakukenttä: raaka syöte → QueryDebouncer → SearchPager."""

    def __init__(self, pager: SearchPager, delay: float = DEBOUNCE_SECONDS):
        self.pager = pager
        self.debouncer = QueryDebouncer(on_query=pager.start_query, on_clear=pager.clear, delay=delay)

    def input(self, text: str, scope: Scope = "all", **filters) -> None:
        # filters: year_min, year_max, rating_min, rating_max, runtime_min, runtime_max
        self.debouncer.push(text, scope, SearchFilters.from_form(**filters))

    async def settle(self) -> SearchSession:
        await self.debouncer.drain()
        return self.pager.session

    async def aclose(self) -> None:
        await self.debouncer.aclose()
