# test_debounce.py — QueryDebouncer ja LiveSearch
#
# Ajastus testataan oikealla asyncio-kellolla mutta lyhyillä viiveillä
# (0.2 s), jotta välit pysyvät selvästi viiveen ala- tai yläpuolella.
#
# Aja: uv run pytest tests/test_debounce.py -v

import asyncio

from binge.debounce import QueryDebouncer
from binge.live import LiveSearch
from binge.models import PageResult, SearchFilters, SearchQuery
from binge.pager import SearchPager

from fakes import FakeCatalog, paged

DELAY = 0.2


class Recorder:
    def __init__(self):
        self.queries: list[SearchQuery] = []
        self.clears = 0

    def on_query(self, query: SearchQuery) -> None:
        self.queries.append(query)

    def on_clear(self) -> None:
        self.clears += 1


# ─────────────────────────────────────────────────────────────
# QueryDebouncer
# ─────────────────────────────────────────────────────────────

async def test_nopea_kirjoitus_tuottaa_yhden_emission():
    rec = Recorder()
    debouncer = QueryDebouncer(rec.on_query, rec.on_clear, delay=DELAY)

    debouncer.push("b")
    await asyncio.sleep(0.04)
    debouncer.push("ba")
    await asyncio.sleep(0.04)
    debouncer.push("bat")
    await asyncio.sleep(0.06)
    debouncer.push("batm")
    await debouncer.drain()

    assert [q.text for q in rec.queries] == ["batm"]
    assert rec.clears == 0
    assert not debouncer.pending


async def test_hiljainen_jakso_paastaa_molemmat():
    rec = Recorder()
    debouncer = QueryDebouncer(rec.on_query, rec.on_clear, delay=DELAY)

    debouncer.push("bat")
    await debouncer.drain()
    debouncer.push("batman")
    await debouncer.drain()

    assert [q.text for q in rec.queries] == ["bat", "batman"]


async def test_emissio_ei_laukea_ennen_viivetta():
    rec = Recorder()
    debouncer = QueryDebouncer(rec.on_query, rec.on_clear, delay=DELAY)

    debouncer.push("batman")
    await asyncio.sleep(DELAY / 2)
    assert debouncer.pending
    assert rec.queries == []
    await debouncer.drain()
    assert len(rec.queries) == 1


async def test_tyhja_syote_tyhjentaa():
    rec = Recorder()
    debouncer = QueryDebouncer(rec.on_query, rec.on_clear, delay=DELAY)

    debouncer.push("batman")
    debouncer.push("   ")
    await debouncer.drain()

    assert rec.queries == []
    assert rec.clears == 1


async def test_kysely_kantaa_scopen_ja_suodattimet():
    rec = Recorder()
    debouncer = QueryDebouncer(rec.on_query, rec.on_clear, delay=DELAY)

    debouncer.push("  thrones ", "tv", SearchFilters(year_min=2010))
    await debouncer.drain()

    assert rec.queries == [SearchQuery(text="thrones", scope="tv", filters=SearchFilters(year_min=2010))]


async def test_cancel_peruu_odottavan():
    rec = Recorder()
    debouncer = QueryDebouncer(rec.on_query, rec.on_clear, delay=DELAY)

    debouncer.push("batman")
    debouncer.cancel()
    await asyncio.sleep(DELAY * 1.5)

    assert rec.queries == []
    assert not debouncer.pending


async def test_aclose_estaa_emission():
    rec = Recorder()
    debouncer = QueryDebouncer(rec.on_query, rec.on_clear, delay=DELAY)

    debouncer.push("batman")
    await debouncer.aclose()
    await asyncio.sleep(DELAY * 1.5)

    assert rec.queries == []


async def test_uusi_push_ei_keskeyta_kaynnissa_olevaa_emissiota():
    started = asyncio.Event()
    release = asyncio.Event()
    finished: list[str] = []

    async def on_query(query: SearchQuery) -> None:
        started.set()
        await release.wait()
        finished.append(query.text)

    debouncer = QueryDebouncer(on_query, lambda: None, delay=DELAY)
    debouncer.push("bat")
    await started.wait()

    debouncer.push("batman")
    release.set()
    await debouncer.drain()

    assert finished == ["bat", "batman"]


async def test_emission_virhe_ei_kaada_debounceria(_logit_tmp_hakemistoon):
    def on_query(query):
        raise RuntimeError("rikki")

    debouncer = QueryDebouncer(on_query, lambda: None, delay=DELAY)
    debouncer.push("batman")
    await debouncer.drain()

    assert not debouncer.pending
    assert "DEBOUNCE EMISSIO EPÄONNISTUI" in (_logit_tmp_hakemistoon / "debug.log").read_text(encoding="utf-8")


# ─────────────────────────────────────────────────────────────
# LiveSearch: debouncer + pager yhdessä
# ─────────────────────────────────────────────────────────────

async def test_vain_viimeisin_kysely_haetaan():
    catalog = FakeCatalog({"batm": paged(100, 5), "batman": paged(100, 5)})
    live = LiveSearch(SearchPager(catalog), delay=DELAY)

    for text in ("b", "ba", "bat", "batm"):
        live.input(text)
        await asyncio.sleep(0.04)
    session = await live.settle()

    assert catalog.calls == [("batm", 1, "all")]
    assert session.query.text == "batm"
    assert len(session.items) == 20


async def test_live_suodattimet_lomakkeelta():
    catalog = FakeCatalog({"batman": paged(100, 1, per_page=2)})
    live = LiveSearch(SearchPager(catalog), delay=DELAY)

    live.input("batman", "movies", year_min="2000", rating_min="")
    session = await live.settle()

    assert session.query.scope == "movies"
    assert session.query.filters == SearchFilters(year_min=2000)
    assert catalog.calls == [("batman", 1, "movies")]


async def test_live_aareton_raja_ei_kaada_hakua():
    catalog = FakeCatalog({"batman": paged(100, 1, per_page=2)})
    live = LiveSearch(SearchPager(catalog), delay=DELAY)

    live.input("batman", runtime_max="inf", rating_min="nan")
    session = await live.settle()

    assert session.query.filters.is_empty()
    assert len(session.items) == 2


async def test_live_tyhja_syote_tyhjentaa_haun():
    catalog = FakeCatalog({"batman": lambda page: PageResult(results=[], page=1, total_pages=0)})
    live = LiveSearch(SearchPager(catalog), delay=DELAY)

    live.input("batman")
    await live.settle()
    live.input("")
    session = await live.settle()

    assert session.query is None
    assert session.page == 0
    await live.aclose()
