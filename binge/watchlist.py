import asyncio
from collections.abc import Awaitable, Callable

from .client import BingeClient
from .config import BINGE_USER_ID, _log
from .errors import RemoteError
from .models import MediaType, WatchlistEntry, WatchlistFilter, WatchlistStats


class WatchlistStore:
    """
    Katselulistan paikallinen näkymä. Omistaa snapshotin yksin.

    Snapshot on aina palvelimen viimeksi vahvistama tila: jokainen onnistunut
    muutos (add/remove/set_watched) odottaa oman täyden uudelleenhakunsa,
    epäonnistunut muutos jättää snapshotin ennalleen. Paikallisia
    deltoja ei koskaan sovelleta.

    Rinnakkaiset muutokset ovat sallittuja eikä niitä jonoteta. Jokainen
    uudelleenhaku saa järjestysnumeron lähtöhetkellä; jos vanhempi haku
    valmistuu uudemman jälkeen, sen tulos hylätään.
    """

    def __init__(self, client: BingeClient, user_id: str = BINGE_USER_ID):
        self._client = client
        self.user_id = user_id
        self._entries: tuple[WatchlistEntry, ...] = ()
        self.error: str | None = None
        self._in_flight = 0
        self._settled = asyncio.Event()
        self._settled.set()
        self._load_seq = 0
        self._applied_seq = 0

    # ── Tila ────────────────────────────────────────────────────

    @property
    def entries(self) -> tuple[WatchlistEntry, ...]:
        return self._entries

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def settled(self) -> bool:
        return self._in_flight == 0

    async def wait_settled(self) -> None:
        await self._settled.wait()

    def _begin(self) -> None:
        self._in_flight += 1
        self._settled.clear()

    def _end(self) -> None:
        self._in_flight -= 1
        if self._in_flight == 0:
            self._settled.set()

    # ── Johdetut luvut (ei verkkoa) ─────────────────────────────

    def get(self, content_id: int, content_type: MediaType) -> WatchlistEntry | None:
        key = (content_id, content_type)
        return next((e for e in self._entries if e.key == key), None)

    def is_member(self, content_id: int, content_type: MediaType) -> bool:
        return self.get(content_id, content_type) is not None

    def stats(self) -> WatchlistStats:
        total = len(self._entries)
        watched = sum(1 for e in self._entries if e.is_watched)
        return WatchlistStats(total=total, watched=watched, unwatched=total - watched)

    def filtered(self, kind: WatchlistFilter = "all") -> tuple[WatchlistEntry, ...]:
        if kind == "watched":
            return tuple(e for e in self._entries if e.is_watched)
        if kind == "unwatched":
            return tuple(e for e in self._entries if not e.is_watched)
        return self._entries

    # ── Palvelinoperaatiot ──────────────────────────────────────

    async def load(self) -> bool:
        self._begin()
        try:
            return await self._refetch()
        finally:
            self._end()

    async def _refetch(self) -> bool:
        self._load_seq += 1
        seq = self._load_seq
        try:
            entries = await self._client.get_watchlist(self.user_id)
        except RemoteError as e:
            if seq < self._applied_seq:
                _log("KATSELULISTA: vanhan haun virhe ohitettu", f"seq={seq} sovellettu={self._applied_seq}\n{e}")
                return True
            self.error = f"Katselulistan lataus epäonnistui: {e}"
            _log("KATSELULISTA: lataus epäonnistui", str(e))
            return False

        if seq < self._applied_seq:
            _log("KATSELULISTA: vanha haku hylätty", f"seq={seq} sovellettu={self._applied_seq}")
            return True
        self._entries = tuple(entries)
        self._applied_seq = seq
        self.error = None
        return True

    async def _mutate(self, label: str, write: Callable[[], Awaitable[None]]) -> bool:
        self._begin()
        try:
            try:
                await write()
            except RemoteError as e:
                self.error = f"{label} epäonnistui: {e}"
                _log("KATSELULISTA: muutos epäonnistui", f"{label}\n{e}")
                return False
            return await self._refetch()
        finally:
            self._end()

    async def add(self, content_id: int, content_type: MediaType) -> bool:
        return await self._mutate(
            "Lisäys katselulistaan",
            lambda: self._client.add_to_watchlist(self.user_id, content_id, content_type),
        )

    async def remove(self, content_id: int, content_type: MediaType) -> bool:
        return await self._mutate(
            "Poisto katselulistalta",
            lambda: self._client.remove_from_watchlist(self.user_id, content_id, content_type),
        )

    async def set_watched(self, content_id: int, content_type: MediaType, watched: bool) -> bool:
        return await self._mutate(
            "Katsottu-tilan päivitys",
            lambda: self._client.mark_watched(self.user_id, content_id, content_type, watched),
        )

    async def toggle_watched(self, content_id: int, content_type: MediaType) -> bool:
        entry = self.get(content_id, content_type)
        if entry is None:
            return False
        return await self.set_watched(content_id, content_type, not entry.is_watched)
