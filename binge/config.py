import datetime
import json
import os
import pathlib

from dotenv import load_dotenv

load_dotenv()

BINGE_API_BASE = os.getenv("BINGE_API_BASE", "http://localhost:8080/api/v1")
BINGE_USER_ID = os.getenv("BINGE_USER_ID", "default_user")
REQUEST_TIMEOUT = float(os.getenv("BINGE_TIMEOUT", "30"))

# Hiljainen jakso ennen kuin hakukentän arvo lähtee eteenpäin
DEBOUNCE_SECONDS = 0.5

IMAGE_BASE = "https://image.tmdb.org/t/p/"

_ROOT = pathlib.Path(__file__).parent.parent
LOG_FILE = _ROOT / "debug.log"
SEARCH_LOG_FILE = _ROOT / "search.log.jsonl"


def _log(section: str, text: str) -> None:
    border = "─" * 60
    entry = f"\n{border}\n[LOG] {section}\n{border}\n{text}\n"
    with LOG_FILE.open("a", encoding="utf-8") as f:
        f.write(entry)


def _log_search(query: str, scope: str, page: int, total_pages: int, result_count: int) -> None:
    entry = {
        "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "query": query,
        "scope": scope,
        "page": page,
        "total_pages": total_pages,
        "result_count": result_count,
    }
    with SEARCH_LOG_FILE.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False) + "\n")
