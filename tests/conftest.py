# conftest.py — yhteiset fixturet
#
# _log ja _log_search kirjoittavat oletuksena projektin juureen
# (debug.log, search.log.jsonl). Testeissä ohjataan ne tmp-hakemistoon.

import pytest


@pytest.fixture(autouse=True)
def _logit_tmp_hakemistoon(tmp_path, monkeypatch):
    monkeypatch.setattr("binge.config.LOG_FILE", tmp_path / "debug.log")
    monkeypatch.setattr("binge.config.SEARCH_LOG_FILE", tmp_path / "search.log.jsonl")
    return tmp_path
