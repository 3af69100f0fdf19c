# src/exporter.py
import csv
import io
from typing import Iterable

from src.errors import ValidationError
from src.models import SearchResult

CSV_FILENAME = "search_titles.csv"


def titles_to_csv(results: Iterable[SearchResult]) -> str:
    """One `title` column, every value quoted, embedded quotes doubled."""
    results = list(results)
    if not results:
        raise ValidationError("No results to export")

    buf = io.StringIO()
    buf.write("title\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for result in results:
        writer.writerow([result.title])
    return buf.getvalue()
