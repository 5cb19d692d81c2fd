import asyncio
import inspect
from collections.abc import Callable

from .config import DEBOUNCE_SECONDS, _log
from .models import Scope, SearchFilters, SearchQuery


class QueryDebouncer:
    """
    Kokoaa nopeasti muuttuvan hakukentän yhdeksi emissioksi.

    Yksi ajastinpaikka: push() peruu odottavan ajastimen ja käynnistää uuden.
    Kun hiljaista on ollut `delay` sekuntia, kutsutaan on_query(SearchQuery)
    tai tyhjällä tekstillä on_clear(). Lauennut emissio ajetaan omana
    taskinaan, joten seuraava push() ei keskeytä sitä.
    """

    def __init__(self, on_query: Callable, on_clear: Callable, delay: float = DEBOUNCE_SECONDS):
        self._on_query = on_query
        self._on_clear = on_clear
        self.delay = delay
        self._timer: asyncio.Task | None = None
        self._emissions: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def push(self, text: str, scope: Scope = "all", filters: SearchFilters | None = None) -> None:
        text = text.strip()
        query = SearchQuery(text=text, scope=scope, filters=filters or SearchFilters()) if text else None
        self.cancel()
        self._timer = asyncio.create_task(self._wait_and_emit(query))

    def cancel(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    async def _wait_and_emit(self, query: SearchQuery | None) -> None:
        await asyncio.sleep(self.delay)
        if self._timer is asyncio.current_task():
            self._timer = None
        task = asyncio.create_task(self._emit(query))
        self._emissions.add(task)
        task.add_done_callback(self._emission_done)

    async def _emit(self, query: SearchQuery | None) -> None:
        result = self._on_clear() if query is None else self._on_query(query)
        if inspect.isawaitable(result):
            await result

    def _emission_done(self, task: asyncio.Task) -> None:
        self._emissions.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _log("DEBOUNCE EMISSIO EPÄONNISTUI", repr(exc))

    async def drain(self) -> None:
        """Odota kunnes ajastinta ei ole ja kaikki emissiot ovat valmiita."""
        while self._timer is not None or self._emissions:
            waiting = [t for t in (self._timer, *self._emissions) if t is not None]
            await asyncio.wait(waiting)

    async def aclose(self) -> None:
        timer, self._timer = self._timer, None
        tasks = [t for t in (timer, *self._emissions) if t is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
