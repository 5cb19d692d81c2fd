from .models import CatalogItem, PageResult, SearchFilters, WatchlistEntry, WatchlistFilter, WatchlistStats
from .state import SearchSession

_TYPE_LABELS = {"movie": "elokuva", "tv": "sarja"}
_FILTER_LABELS = {"all": "Kaikki", "watched": "Katsotut", "unwatched": "Katsomatta"}


def format_item(item: CatalogItem, genre_map: dict[int, str] | None = None) -> str:
    genre_map = genre_map or {}
    genre_names = [genre_map.get(gid, str(gid)) for gid in item.genre_ids]
    year = item.year or "?"
    vote = f"{item.vote_average:.1f}/10" if item.vote_average is not None else "ei arvosanaa"
    votes = f" ({item.vote_count} ääntä)" if item.vote_count else ""
    return (
        f"[{item.id}] {item.title or '?'} ({year}) — {_TYPE_LABELS[item.media_type]}\n"
        f"  Genret: {', '.join(genre_names) or '-'} | {vote}{votes}\n"
        f"  {item.overview[:150]}"
    )


def format_filters(filters: SearchFilters) -> str:
    if filters.is_empty():
        return ""
    parts = []
    for label, low, high, unit in (
        ("vuosi", filters.year_min, filters.year_max, ""),
        ("arvosana", filters.rating_min, filters.rating_max, ""),
        ("kesto", filters.runtime_min, filters.runtime_max, " min"),
    ):
        if low is not None:
            parts.append(f"{label} ≥ {low:g}{unit}")
        if high is not None:
            parts.append(f"{label} ≤ {high:g}{unit}")
    return "Suodattimet: " + ", ".join(parts)


def format_session(session: SearchSession, genre_map: dict[int, str] | None = None) -> str:
    if session.query is None:
        return "Hakukenttä on tyhjä. Anna hakusana."

    query = session.query.text
    active = format_filters(session.query.filters)
    if session.status == "error" and not session.items:
        return f"Virhe haussa '{query}': {session.error}\nYritä uudelleen."
    if session.status == "loading" and not session.items:
        return f"Haetaan '{query}'..."
    if not session.items:
        if active:
            return f"Ei tuloksia haulle '{query}'.\n{active}"
        return f"Ei tuloksia haulle '{query}'."

    header = f"Hakutulos '{query}': {len(session.items)} osumaa (sivu {session.page}/{session.total_pages})"
    if active:
        header += f"\n{active}"
    lines = [header + "\n"]
    lines += [format_item(item, genre_map) for item in session.items]
    if session.status == "error":
        lines.append(f"Lisäsivun haku epäonnistui: {session.error} — kokeile load_more uudelleen.")
    elif session.can_load_more:
        lines.append("Lisää tuloksia saatavilla: load_more.")
    return "\n\n".join(lines)


def format_page(result: PageResult, heading: str, genre_map: dict[int, str] | None = None) -> str:
    if not result.results:
        return f"{heading}: ei tuloksia."
    lines = [f"{heading} (sivu {result.page}/{result.total_pages})\n"]
    lines += [format_item(item, genre_map) for item in result.results]
    return "\n\n".join(lines)


def format_stats(stats: WatchlistStats) -> str:
    return f"Yhteensä {stats.total} | katsottu {stats.watched} | katsomatta {stats.unwatched}"


def format_watchlist(entries: tuple[WatchlistEntry, ...], stats: WatchlistStats, kind: WatchlistFilter = "all") -> str:
    header = f"Katselulista — {_FILTER_LABELS[kind]}\n{format_stats(stats)}\n"
    if not entries:
        if stats.total == 0:
            return header + "\nKatselulista on tyhjä."
        return header + "\nSuodattimella ei löydy rivejä."

    lines = [header]
    for entry in entries:
        mark = "✓" if entry.is_watched else "·"
        year = entry.details.year if entry.details and entry.details.year else "?"
        added = f" | lisätty {entry.added_at:%Y-%m-%d}" if entry.added_at else ""
        watched = f" | katsottu {entry.watched_at:%Y-%m-%d}" if entry.watched_at else ""
        lines.append(
            f"{mark} [{entry.content_id}] {entry.title} ({year}) — "
            f"{_TYPE_LABELS[entry.content_type]}{added}{watched}"
        )
    return "\n".join(lines)
