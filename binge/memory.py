import sys

from .client import BingeClient
from .config import _log
from .errors import RemoteError
from .models import Genre


class CatalogMemory:
    """Käynnistyksessä kerran ladattavat katalogitiedot (genret)."""

    def __init__(self):
        self.genres: list[Genre] = []

    async def load(self, client: BingeClient) -> None:
        try:
            self.genres = await client.genres()
        except RemoteError as e:
            _log("MUISTI: genrejen lataus epäonnistui", str(e))
            print(f"VAROITUS: genrejä ei ladattu ({e}) — jatketaan ilman", file=sys.stderr)
            return
        print(f"Muisti ladattu: {len(self.genres)} genreä", file=sys.stderr)

    def genre_map(self) -> dict[int, str]:
        return {g.id: g.name for g in self.genres}

    def find_genre(self, name_or_id: str) -> Genre | None:
        text = name_or_id.strip().lower()
        for g in self.genres:
            if g.name.lower() == text or str(g.id) == text:
                return g
        return None
