"""CSV and PDF encodings of a response sequence.

Both functions are pure: they take the records to export and return the
encoded payload, leaving any listing state untouched.
"""
from __future__ import annotations

import html
import io
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import fitz  # PyMuPDF
import pandas as pd

from config import EXPORT_UTC_OFFSET_MINUTES, EXPORT_TZ_LABEL
from questions import RATING_KEYS, split_camel

EXPORT_TZ = timezone(timedelta(minutes=EXPORT_UTC_OFFSET_MINUTES), EXPORT_TZ_LABEL)
CSV_COLUMNS = ["name", "email", "domain", "created_at", *RATING_KEYS, "suggestions"]
PDF_TITLE = "Survey Responses"
PDF_EMPTY_NOTICE = "No responses found"

_PDF_CSS = """
h1 { font-size: 14pt; font-family: sans-serif; }
p { font-size: 11pt; font-family: sans-serif; }
table { border-collapse: collapse; font-size: 7pt; font-family: sans-serif; }
th { background-color: #282828; color: #ffffff; padding: 3px; text-align: left; }
td { border: 1px solid #cccccc; padding: 3px; }
"""


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _as_export_tz(value: datetime) -> datetime:
    return _as_utc(value).astimezone(EXPORT_TZ)


def export_timestamp(now: Optional[datetime] = None) -> str:
    """``YYYY-MM-DD_HH-MM`` in the export timezone."""
    return _as_export_tz(now or datetime.now(timezone.utc)).strftime("%Y-%m-%d_%H-%M")


def export_filename(ext: str, now: Optional[datetime] = None) -> str:
    return f"survey_responses_{export_timestamp(now)}.{ext}"


def format_local(value: datetime) -> str:
    """Human-readable submission time, e.g. ``19 Oct 2026, 07:05 pm``."""
    dt = _as_export_tz(value)
    return f"{dt.day} {dt:%b %Y}, {dt:%I:%M} {dt:%p}".replace("AM", "am").replace("PM", "pm")


def flat_rows(records: Sequence) -> list[dict]:
    """One flat dict per record in CSV column order."""
    rows = []
    for r in records:
        row = {
            "name": r.name,
            "email": r.email,
            "domain": r.email.partition("@")[2],
            "created_at": _as_utc(r.created_at).isoformat(),
        }
        for key in RATING_KEYS:
            row[key] = r.responses.get(key, "")
        row["suggestions"] = r.suggestions or ""
        rows.append(row)
    return rows


def to_csv(records: Sequence) -> str:
    df = pd.DataFrame(flat_rows(records), columns=CSV_COLUMNS, dtype=str)
    return df.to_csv(index=False, lineterminator="\n")


def pdf_headers() -> list[str]:
    return ["Name", "Email", "Domain", "Submitted At", *(split_camel(k) for k in RATING_KEYS), "Suggestions"]


def pdf_rows(records: Sequence) -> list[list[str]]:
    out = []
    for row, r in zip(flat_rows(records), records):
        out.append([
            row["name"],
            row["email"],
            row["domain"],
            format_local(r.created_at),
            *(str(row[k]) for k in RATING_KEYS),
            row["suggestions"],
        ])
    return out


def _pdf_html(records: Sequence) -> str:
    parts = [f"<h1>{PDF_TITLE}</h1>"]
    if not records:
        parts.append(f"<p>{PDF_EMPTY_NOTICE}</p>")
        return "".join(parts)
    head = "".join(f"<th>{html.escape(h)}</th>" for h in pdf_headers())
    body = "".join(
        "<tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in cells) + "</tr>"
        for cells in pdf_rows(records)
    )
    parts.append(f"<table><tr>{head}</tr>{body}</table>")
    return "".join(parts)


def to_pdf(records: Sequence) -> bytes:
    """Lay out the title and response table over as many landscape A4 pages as needed."""
    story = fitz.Story(html=_pdf_html(records), user_css=_PDF_CSS)
    buf = io.BytesIO()
    writer = fitz.DocumentWriter(buf)
    mediabox = fitz.paper_rect("a4-l")
    where = mediabox + (36, 36, -36, -36)
    more = True
    while more:
        device = writer.begin_page(mediabox)
        more, _ = story.place(where)
        story.draw(device)
        writer.end_page()
    writer.close()
    return buf.getvalue()
