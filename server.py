from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from mcp.server.fastmcp import Context, FastMCP

from binge.client import BingeClient
from binge.config import _log
from binge.errors import RemoteError
from binge.live import LiveSearch
from binge.memory import CatalogMemory
from binge.pager import SearchPager
from binge.tools import format_item, format_page, format_session, format_stats, format_watchlist
from binge.watchlist import WatchlistStore


@dataclass
class AppContext:
    client: BingeClient
    memory: CatalogMemory
    watchlist: WatchlistStore
    pager: SearchPager
    live: LiveSearch


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    client = BingeClient()
    pager = SearchPager(client)
    app = AppContext(
        client=client,
        memory=CatalogMemory(),
        watchlist=WatchlistStore(client),
        pager=pager,
        live=LiveSearch(pager),
    )
    await app.memory.load(client)
    if not await app.watchlist.load():
        _log("KÄYNNISTYS", f"Katselulistaa ei saatu ladattua: {app.watchlist.error}")
    try:
        yield app
    finally:
        await app.live.aclose()
        await client.aclose()


mcp = FastMCP("bingebase", lifespan=lifespan)


def _app(ctx: Context) -> AppContext:
    return ctx.request_context.lifespan_context


def _bad_type(type: str, allowed: tuple[str, ...] = ("movie", "tv")) -> str | None:
    if type not in allowed:
        return f"Tuntematon tyyppi: '{type}'. Sallitut: {', '.join(allowed)}."
    return None


def _watchlist_reply(app: AppContext, ok: bool, done: str) -> str:
    if not ok:
        return f"Virhe: {app.watchlist.error}"
    return f"{done}\n{format_stats(app.watchlist.stats())}"


# ─────────────────────────────────────────────────────────────
# Haku
# ─────────────────────────────────────────────────────────────

@mcp.tool()
async def search(
    query: str,
    ctx: Context,
    type: str = "all",
    year_min: str | None = None,
    year_max: str | None = None,
    rating_min: str | None = None,
    rating_max: str | None = None,
    runtime_min: str | None = None,
    runtime_max: str | None = None,
) -> str:
    """
    Hae elokuvia ja sarjoja. Nopeat peräkkäiset haut yhdistyvät: vain viimeisin näytetään.
    query: hakusana (tyhjä tyhjentää haun)
    type: 'all', 'movies' tai 'tv'
    year_min/year_max, rating_min/rating_max, runtime_min/runtime_max: valinnaiset rajat
    """
    if err := _bad_type(type, ("all", "movies", "tv")):
        return err
    app = _app(ctx)
    app.live.input(
        query,
        type,
        year_min=year_min,
        year_max=year_max,
        rating_min=rating_min,
        rating_max=rating_max,
        runtime_min=runtime_min,
        runtime_max=runtime_max,
    )
    session = await app.live.settle()
    return format_session(session, app.memory.genre_map())


@mcp.tool()
async def load_more(ctx: Context) -> str:
    """Hae nykyiselle haulle seuraava tulossivu."""
    app = _app(ctx)
    before = app.pager.session
    if before.query is None:
        return "Ei aktiivista hakua."
    if before.status == "loading":
        return "Haku on vielä kesken — odota hetki."
    if not before.can_load_more:
        return f"Kaikki sivut haettu ({before.page}/{before.total_pages})."
    await app.pager.load_more()
    return format_session(app.pager.session, app.memory.genre_map())


@mcp.tool()
async def search_status(ctx: Context) -> str:
    """Näytä nykyisen haun tila ja kertyneet tulokset."""
    app = _app(ctx)
    return format_session(app.pager.session, app.memory.genre_map())


@mcp.tool()
async def get_details(id: int, ctx: Context, type: str = "movie") -> str:
    """
    Hae elokuvan tai sarjan tiedot id:llä.
    id: katalogin id (saadaan hausta)
    type: 'movie' tai 'tv'
    """
    if err := _bad_type(type):
        return err
    app = _app(ctx)
    try:
        item = await app.client.get_details(id, type)
    except RemoteError as e:
        if getattr(e, "not_found", False):
            return f"Ei löydy: {type} {id}."
        return f"Virhe tietojen haussa: {e}"

    entry = app.watchlist.get(id, type)
    if entry is None:
        status = "ei katselulistalla"
    else:
        status = "katselulistalla, katsottu" if entry.is_watched else "katselulistalla, katsomatta"
    lines = [format_item(item, app.memory.genre_map())]
    if item.runtime:
        lines.append(f"  Kesto: {item.runtime} min")
    if item.poster_url():
        lines.append(f"  Juliste: {item.poster_url()}")
    lines.append(f"  Tila: {status}")
    return "\n".join(lines)


@mcp.tool()
async def trending(ctx: Context, type: str = "all", page: int = 1) -> str:
    """
    Trendaavat elokuvat ja sarjat.
    type: 'all', 'movie' tai 'tv'
    """
    if err := _bad_type(type, ("all", "movie", "tv")):
        return err
    app = _app(ctx)
    try:
        result = await app.client.trending(type, page)
    except RemoteError as e:
        return f"Virhe trendien haussa: {e}"
    return format_page(result, f"Trendaa nyt ({type})", app.memory.genre_map())


@mcp.tool()
async def list_genres(ctx: Context) -> str:
    """Listaa käytettävissä olevat genret."""
    app = _app(ctx)
    if not app.memory.genres:
        return "Genrejä ei ladattu — onko backend käynnissä?"
    return "\n".join(f"{g.id}: {g.name}" for g in app.memory.genres)


@mcp.tool()
async def browse_genre(genre: str, ctx: Context, type: str = "movie", page: int = 1) -> str:
    """
    Selaa genren elokuvia tai sarjoja.
    genre: genren nimi tai id
    type: 'movie' tai 'tv'
    """
    if err := _bad_type(type):
        return err
    app = _app(ctx)
    match = app.memory.find_genre(genre)
    if match is None:
        if not genre.strip().isdigit():
            return f"Tuntematon genre: '{genre}'. Käytä list_genres-työkalua."
        genre_id, name = int(genre), genre
    else:
        genre_id, name = match.id, match.name
    try:
        result = await app.client.genre_content(genre_id, type, page)
    except RemoteError as e:
        return f"Virhe genren haussa: {e}"
    return format_page(result, f"Genre {name} ({type})", app.memory.genre_map())


# ─────────────────────────────────────────────────────────────
# Katselulista
# ─────────────────────────────────────────────────────────────

@mcp.tool()
async def watchlist(ctx: Context, filter: str = "all", refresh: bool = False) -> str:
    """
    Näytä katselulista.
    filter: 'all', 'watched' tai 'unwatched'
    refresh: hae lista ensin palvelimelta
    """
    if err := _bad_type(filter, ("all", "watched", "unwatched")):
        return err
    app = _app(ctx)
    store = app.watchlist
    if refresh and not await store.load():
        return f"Virhe: {store.error}"
    text = format_watchlist(store.filtered(filter), store.stats(), filter)
    if store.error:
        text += f"\n\nHuom: {store.error}"
    return text


@mcp.tool()
async def watchlist_add(id: int, ctx: Context, type: str = "movie") -> str:
    """Lisää elokuva tai sarja katselulistalle."""
    if err := _bad_type(type):
        return err
    app = _app(ctx)
    ok = await app.watchlist.add(id, type)
    return _watchlist_reply(app, ok, f"Lisätty katselulistaan: {type} {id}.")


@mcp.tool()
async def watchlist_remove(id: int, ctx: Context, type: str = "movie") -> str:
    """Poista elokuva tai sarja katselulistalta."""
    if err := _bad_type(type):
        return err
    app = _app(ctx)
    ok = await app.watchlist.remove(id, type)
    return _watchlist_reply(app, ok, f"Poistettu katselulistalta: {type} {id}.")


@mcp.tool()
async def watchlist_mark(id: int, ctx: Context, type: str = "movie", watched: bool = True) -> str:
    """Merkitse katsotuksi (watched=true) tai katsomattomaksi (watched=false)."""
    if err := _bad_type(type):
        return err
    app = _app(ctx)
    ok = await app.watchlist.set_watched(id, type, watched)
    label = "katsotuksi" if watched else "katsomattomaksi"
    return _watchlist_reply(app, ok, f"Merkitty {label}: {type} {id}.")


@mcp.tool()
async def watchlist_toggle(id: int, ctx: Context, type: str = "movie") -> str:
    """Vaihda katsottu-tila päinvastaiseksi."""
    if err := _bad_type(type):
        return err
    app = _app(ctx)
    if not app.watchlist.is_member(id, type):
        return f"{type} {id} ei ole katselulistalla."
    ok = await app.watchlist.toggle_watched(id, type)
    return _watchlist_reply(app, ok, f"Katsottu-tila vaihdettu: {type} {id}.")


@mcp.tool()
async def health(ctx: Context) -> str:
    """Tarkista backendin tila."""
    app = _app(ctx)
    try:
        data = await app.client.health()
    except RemoteError as e:
        return f"Backend ei vastaa: {e}"
    return f"{data.get('status', '?')}: {data.get('message', '')}"


if __name__ == "__main__":
    mcp.run()
