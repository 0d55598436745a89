# ui/views.py
"""
DataFrame shaping for the dashboard. Kept free of Streamlit calls so it can be
tested directly.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

STATUS_OK = "success"
STATUS_FAILED = "failed"

RESULT_COLUMNS = ["name", "arch", "status", "log_lines"]


def results_frame(results: Iterable[dict]) -> pd.DataFrame:
    """One row per (name, arch) with a readable status and log size."""
    rows = [
        {
            "name": r["name"],
            "arch": r["arch"],
            "status": STATUS_OK if r["success"] else STATUS_FAILED,
            "log_lines": len(r["log"].splitlines()),
        }
        for r in results
    ]
    df = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    return df.sort_values(["name", "arch"], ignore_index=True)


def filter_results(
    df: pd.DataFrame,
    arches: Optional[List[str]] = None,
    status: Optional[str] = None,
    name_contains: str = "",
) -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)
    if arches:
        mask &= df["arch"].isin(arches)
    if status in (STATUS_OK, STATUS_FAILED):
        mask &= df["status"] == status
    if name_contains:
        mask &= df["name"].str.contains(name_contains, case=False, regex=False)
    return df[mask].reset_index(drop=True)


def summarize(df: pd.DataFrame) -> dict:
    failed = int((df["status"] == STATUS_FAILED).sum())
    return {
        "packages": int(df["name"].nunique()),
        "results": int(len(df)),
        "failed": failed,
        "succeeded": int(len(df)) - failed,
    }


def arch_matrix(df: pd.DataFrame) -> pd.DataFrame:
    """Pivot to package x arch with the status in each cell."""
    if df.empty:
        return pd.DataFrame()
    return df.pivot(index="name", columns="arch", values="status").fillna("")
