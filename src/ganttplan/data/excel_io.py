from __future__ import annotations

import io
import re
import unicodedata
from datetime import datetime

import pandas as pd


def read_table_bytes(content: bytes, *, filename: str = "") -> pd.DataFrame:
    """Read .xlsx or .csv bytes into a DataFrame (first sheet for Excel)."""
    bio = io.BytesIO(content)
    if str(filename).strip().lower().endswith(".csv"):
        df = pd.read_csv(bio, dtype=str, keep_default_na=False)
    else:
        df = pd.read_excel(bio)
    df.columns = [str(c).strip() for c in df.columns]
    return df


def normalize_col_name(name: str) -> str:
    """Normalize column names to an ASCII-ish lowercase token.

    'StartingDateTime' -> 'startingdatetime', 'Source No' -> 'source_no'.
    """
    s = str(name or "").strip().lower()
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = s.replace("\u00a0", " ")
    s = re.sub(r"[^a-z0-9 ]+", " ", s)
    s = re.sub(r"\s+", "_", s).strip("_")
    return s


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [normalize_col_name(c) for c in df.columns]
    return df


def is_blank(value) -> bool:
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        pass
    s = str(value).strip()
    return not s or s.lower() == "nan"


def clean_str(value) -> str | None:
    if is_blank(value):
        return None
    s = str(value).replace("\u00a0", " ").strip()
    # Excel turns 000123 into 123.0
    if re.fullmatch(r"\d+\.0", s):
        s = s[:-2]
    return s


def coerce_int(value, *, field: str) -> int | None:
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field} invalid: {value!r}")
    if isinstance(value, int):
        return int(value)
    try:
        f = float(str(value).strip().replace(",", "."))
    except ValueError:
        raise ValueError(f"{field} must be a number: {value!r}") from None
    if not f.is_integer():
        raise ValueError(f"{field} must be a whole number: {value!r}")
    return int(f)


_DATE_FORMATS = (
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%d-%m-%Y %H:%M",
    "%d/%m/%Y %H:%M",
    "%d-%m-%Y %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%Y/%m/%d",
)


def coerce_datetime(value, *, field: str) -> datetime:
    """Coerce Excel/pandas/str date representations to a naive datetime.

    Accepts datetime/Timestamp, ISO strings, DD-MM-YYYY and DD/MM/YYYY (with
    optional time).
    """
    if is_blank(value):
        raise ValueError(f"{field} empty")

    if isinstance(value, datetime):
        dt = value
    elif hasattr(value, "to_pydatetime"):
        dt = value.to_pydatetime()
    else:
        s = str(value).strip()
        dt = None
        for fmt in _DATE_FORMATS:
            try:
                dt = datetime.strptime(s, fmt)
                break
            except ValueError:
                continue
        if dt is None:
            try:
                dt = datetime.fromisoformat(s)
            except ValueError:
                raise ValueError(f"{field} invalid date: {value!r} (use DD-MM-YYYY)") from None

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt
