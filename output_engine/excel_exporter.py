"""
Excel exporter — writes ranked opportunity analyses to a formatted .xlsx file.

The workbook has two sheets:
  1. "Matched Opportunities" — analyses flagged as a realistic match
  2. "All Opportunities"     — every analysed process, for reference

Both sheets are written in ranking order (open → corporate → score).

Colour scheme (fill colour in the Score column):
  90-100: Dark green  — excellent
  60-89:  Green       — match band
  30-59:  Amber       — risky, needs a partner
  0-29:   Grey        — poor fit
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import openpyxl
from openpyxl.styles import (
    Alignment,
    Border,
    Font,
    PatternFill,
    Side,
)
from openpyxl.utils import get_column_letter

from matching.analyzer import AnalyzedTender
from matching.insights import headline
from matching.ranking import rank
import config

logger = logging.getLogger(__name__)

# ── Colour fills ──────────────────────────────────────────────────────────────
FILL_EXCELLENT = PatternFill("solid", fgColor="1A7A3C")   # Dark green
FILL_GOOD      = PatternFill("solid", fgColor="4CAF50")   # Green
FILL_POSSIBLE  = PatternFill("solid", fgColor="FFC107")   # Amber
FILL_POOR      = PatternFill("solid", fgColor="B0BEC5")   # Grey
FILL_HEADER    = PatternFill("solid", fgColor="1B3A6B")   # Navy blue header
FILL_ALT_ROW   = PatternFill("solid", fgColor="F0F4FF")   # Light blue alt row

FONT_HEADER  = Font(name="Calibri", bold=True, color="FFFFFF", size=11)
FONT_TITLE   = Font(name="Calibri", bold=True, color="1B3A6B", size=10)
FONT_BODY    = Font(name="Calibri", size=10)
FONT_SCORE   = Font(name="Calibri", bold=True, color="FFFFFF", size=10)

THIN_BORDER = Border(
    left=Side(style="thin", color="D0D7E5"),
    right=Side(style="thin", color="D0D7E5"),
    top=Side(style="thin", color="D0D7E5"),
    bottom=Side(style="thin", color="D0D7E5"),
)

WRAPPED = ("Description", "Entity", "Advice", "Warnings")

COLUMN_DEFS = [
    # (header,       width, getter)
    ("#",            5,     None),
    ("Score",        8,     lambda i: i.analysis.score),
    ("Match",        8,     lambda i: i.analysis.match),
    ("Open",         8,     lambda i: i.analysis.actionable),
    ("Corporate",    10,    lambda i: i.analysis.corporate),
    ("Process ID",   22,    lambda i: i.tender.tender_id),
    ("Description",  48,    lambda i: i.tender.description),
    ("Entity",       28,    lambda i: i.tender.entity),
    ("Location",     18,    lambda i: i.tender.location),
    ("Budget",       18,    lambda i: i.tender.display_budget()),
    ("Phase",        20,    lambda i: i.tender.phase),
    ("Published",    14,    lambda i: i.tender.display_published()),
    ("Headline",     36,    lambda i: headline(i.analysis)),
    ("Advice",       48,    lambda i: i.analysis.advice),
    ("Warnings",     48,    lambda i: i.analysis.warnings),
    ("Link",         14,    lambda i: i.tender.url),
]


def _score_fill(score: int) -> PatternFill:
    if score >= 90:
        return FILL_EXCELLENT
    if score >= 60:
        return FILL_GOOD
    if score >= 30:
        return FILL_POSSIBLE
    return FILL_POOR


def _display(val):
    if isinstance(val, (list, tuple)):
        return "\n".join(str(v) for v in val)
    if isinstance(val, bool):
        return "✓" if val else "✗"
    if val is None or val == "":
        return "—"
    return val


def _write_sheet(
    ws,
    items: List[AnalyzedTender],
    title: str,
    run_date: str,
) -> None:
    """Write the analysed tenders into a worksheet."""

    # ── Title row ─────────────────────────────────────────────────────────────
    ws.merge_cells(f"A1:{get_column_letter(len(COLUMN_DEFS))}1")
    title_cell = ws["A1"]
    title_cell.value = f"{title}  |  Run: {run_date}  |  {len(items)} result(s)"
    title_cell.font = Font(name="Calibri", bold=True, size=13, color="1B3A6B")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")
    ws.row_dimensions[1].height = 24

    # ── Header row ────────────────────────────────────────────────────────────
    for col_idx, (header, width, _) in enumerate(COLUMN_DEFS, start=1):
        cell = ws.cell(row=2, column=col_idx, value=header)
        cell.font = FONT_HEADER
        cell.fill = FILL_HEADER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = THIN_BORDER
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    ws.row_dimensions[2].height = 22

    # ── Data rows ─────────────────────────────────────────────────────────────
    for row_idx, item in enumerate(items, start=1):
        excel_row = row_idx + 2
        alt = (row_idx % 2 == 0)

        for col_idx, (header, _, getter) in enumerate(COLUMN_DEFS, start=1):
            value = row_idx if getter is None else _display(getter(item))

            cell = ws.cell(row=excel_row, column=col_idx, value=value)
            cell.border = THIN_BORDER
            cell.font = FONT_BODY
            cell.alignment = Alignment(vertical="center", wrap_text=(header in WRAPPED))

            if alt and header != "Score":
                cell.fill = FILL_ALT_ROW

            if header == "Score":
                cell.fill = _score_fill(item.analysis.score)
                cell.font = FONT_SCORE
                cell.alignment = Alignment(horizontal="center", vertical="center")

            if header == "Description":
                cell.font = FONT_TITLE

            if header == "Link" and value and value != "—":
                cell.hyperlink = str(value)
                cell.font = Font(
                    name="Calibri", size=10, color="0563C1", underline="single"
                )
                cell.value = "Open ↗"

        ws.row_dimensions[excel_row].height = 48

    # ── Freeze panes & auto-filter ────────────────────────────────────────────
    ws.freeze_panes = "A3"
    ws.auto_filter.ref = f"A2:{get_column_letter(len(COLUMN_DEFS))}{len(items) + 2}"


def export_to_excel(
    matched: List[AnalyzedTender],
    all_analyzed: List[AnalyzedTender],
    output_dir: Optional[str] = None,
) -> str:
    """
    Write the two-sheet Excel file and return its path.

    Args:
        matched:      Analyses shown on the "Matched Opportunities" sheet.
        all_analyzed: Every analysis, for the "All Opportunities" sheet.
        output_dir:   Directory to save the file. Defaults to config.OUTPUT_DIR.

    Returns:
        Absolute path of the saved .xlsx file.
    """
    out_dir = Path(output_dir or config.OUTPUT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)

    run_date = datetime.now().strftime("%d %b %Y %H:%M")
    date_tag = datetime.now().strftime("%Y-%m-%d")
    filepath = out_dir / config.OUTPUT_FILENAME.format(date=date_tag)

    wb = openpyxl.Workbook()

    # ── Sheet 1: Matched Opportunities ────────────────────────────────────────
    ws1 = wb.active
    ws1.title = "Matched Opportunities"
    _write_sheet(ws1, rank(matched), "Matched Opportunities — Realistic Bids", run_date)

    # ── Sheet 2: All Opportunities ────────────────────────────────────────────
    ws2 = wb.create_sheet("All Opportunities")
    _write_sheet(ws2, rank(all_analyzed), "All Analysed Processes", run_date)

    wb.save(filepath)
    logger.info("Excel saved: %s", filepath.resolve())
    return str(filepath.resolve())
