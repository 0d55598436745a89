# ui/cache.py
from __future__ import annotations

from typing import List, Optional

import streamlit as st

from reworkit.config import DB_FILE_PATH
from reworkit.db.services import BuildResultService

# Lazy service singleton (created on first use)
_result_svc: Optional[BuildResultService] = None


def get_result_service() -> BuildResultService:
    global _result_svc
    if _result_svc is None:
        _result_svc = BuildResultService(DB_FILE_PATH)
    return _result_svc


# Cached loaders return plain dicts so st.cache_data can pickle them
@st.cache_data(ttl=30)
def cached_load_results() -> List[dict]:
    svc = get_result_service()
    return [r.to_dict() for r in svc.list_results()]


@st.cache_data(ttl=30)
def cached_load_result(name: str, arch: str) -> dict:
    svc = get_result_service()
    return svc.get_result(name, arch).to_dict()


def invalidate_results():
    cached_load_results.clear()
    cached_load_result.clear()
