"""Spreadsheet export for saved events."""

from __future__ import annotations

import re
from io import BytesIO

import pandas as pd
from openpyxl.utils import get_column_letter

from .services import Event

SHEET_NAME = "Scores"
HEADERS = ["Team Name", "Members", "Score"]
MEMBER_SEPARATOR = ", "
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_WHITESPACE = re.compile(r"\s+")


def export_rows(event: Event) -> list[list[object]]:
    """Return one ``[team, members, score]`` row per team in stored order."""

    return [
        [team.name, MEMBER_SEPARATOR.join(team.members), team.export_score]
        for team in event.teams
    ]


def export_filename(title: str) -> str:
    return f"{_WHITESPACE.sub('_', title)}_scores.xlsx"


def _column_widths(rows: list[list[object]]) -> list[int]:
    widths = [len(header) for header in HEADERS]
    for row in rows:
        for index, value in enumerate(row):
            widths[index] = max(widths[index], len(str(value)))
    return widths


def build_scores_workbook(event: Event) -> bytes:
    """Render the event as a single-sheet ``Scores`` workbook."""

    rows = export_rows(event)
    # object dtype keeps integral scores as int next to float ones
    frame = pd.DataFrame(rows, columns=HEADERS, dtype=object)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        sheet = writer.sheets[SHEET_NAME]
        # Names are text; openpyxl would store values starting with "=" as formulas.
        for row in sheet.iter_rows(min_row=2):
            for cell in row:
                if cell.data_type == "f":
                    cell.data_type = "s"
        for index, width in enumerate(_column_widths(rows), start=1):
            sheet.column_dimensions[get_column_letter(index)].width = width
    return buffer.getvalue()
