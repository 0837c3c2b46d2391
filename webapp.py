"""
webapp.py — local JSON API around the matching engine.

Run:  python webapp.py
Open: http://localhost:5000/api/profile

Endpoints:
  GET  /api/profile          bidder profile and its capacity
  POST /api/analyze          {"tender": {...}, "contracts": [...], "hint": {...}}
  POST /api/rank             {"tenders": [...], "contracts": [...], "hints": {id: {...}}}
  GET  /api/reports          Excel reports in the output folder
  GET  /reports/<filename>   download one report
"""

import logging
from datetime import datetime
from pathlib import Path

import openpyxl
from flask import Flask, abort, jsonify, request, send_from_directory

import config
from matching.analyzer import AnalyzedTender, analyze, analyze_all, resolve_capacity
from matching.hints import hints_from_mapping
from matching.insights import headline, identify_risk, portfolio_stats, suggested_deliverables
from matching.ranking import rank
from procurement.ingest import contracts_from_rows, tender_from_feed

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s — %(message)s")
log = logging.getLogger("webapp")

app = Flask(__name__)

REPORT_GLOB = "opportunities_*.xlsx"


class ApiError(Exception):
    pass


@app.errorhandler(ApiError)
def _bad_request(exc):
    return jsonify({"error": str(exc)}), 400


def _body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ApiError("Request body must be a JSON object")
    return body


def _contracts(body: dict):
    rows = body.get("contracts") or []
    if not isinstance(rows, list):
        raise ApiError("'contracts' must be a list")
    return contracts_from_rows(rows)


# ── Serialiser ────────────────────────────────────────────────────────────────

def _to_dict(item: AnalyzedTender, position: int, capacity) -> dict:
    t, a = item.tender, item.analysis
    risk = identify_risk(t, a, capacity)
    return dict(
        a.to_dict(),
        rank=position,
        tender_id=t.tender_id,
        description=t.description,
        entity=t.entity,
        location=t.location,
        budget=t.budget,
        budget_display=t.display_budget(),
        phase=t.phase,
        url=t.url,
        headline=headline(a),
        risk=None if risk is None else {
            "title": risk.title,
            "description": risk.description,
            "severity": risk.severity,
        },
    )


# ── API ───────────────────────────────────────────────────────────────────────

@app.get("/api/profile")
def api_profile():
    profile = config.BIDDER_PROFILE
    return jsonify({
        "name": profile.name,
        "category_codes": list(profile.category_codes),
        "financial_indicators_configured": profile.financial_indicators is not None,
        "capacity": resolve_capacity(profile),
    })


@app.post("/api/analyze")
def api_analyze():
    body = _body()
    raw_tender = body.get("tender")
    if not isinstance(raw_tender, dict):
        raise ApiError("'tender' must be a JSON object")

    tender = tender_from_feed(raw_tender)
    analysis = analyze(
        tender,
        config.BIDDER_PROFILE,
        _contracts(body),
        body.get("hint"),
        rules=config.MATCHING_RULES,
    )
    return jsonify(dict(
        analysis.to_dict(),
        tender_id=tender.tender_id,
        headline=headline(analysis),
        deliverables=suggested_deliverables(tender.description),
    ))


@app.post("/api/rank")
def api_rank():
    body = _body()
    rows = body.get("tenders")
    if not isinstance(rows, list):
        raise ApiError("'tenders' must be a list")

    profile = config.BIDDER_PROFILE
    analyzed = analyze_all(
        rows,
        profile,
        _contracts(body),
        hints_from_mapping(body.get("hints")),
        rules=config.MATCHING_RULES,
        max_workers=config.MAX_WORKERS,
    )
    ranked = rank(analyzed)
    capacity = resolve_capacity(profile)
    log.info("Ranked %d tender(s) for %s", len(ranked), profile.name)
    return jsonify({
        "stats": portfolio_stats(ranked),
        "results": [_to_dict(item, i + 1, capacity) for i, item in enumerate(ranked)],
    })


@app.get("/api/reports")
def api_reports():
    """List all Excel reports in the output folder, newest first."""
    reports = Path(config.OUTPUT_DIR)
    files = sorted(
        [f for f in reports.glob(REPORT_GLOB) if not f.name.startswith("~$")],
        key=lambda f: f.stat().st_mtime, reverse=True,
    )
    result = []
    for f in files:
        mtime = datetime.fromtimestamp(f.stat().st_mtime)
        try:
            wb = openpyxl.load_workbook(f, data_only=True, read_only=True)
            ws = wb["Matched Opportunities"] if "Matched Opportunities" in wb.sheetnames else None
            rows = (ws.max_row - 2) if ws else 0  # title + header rows
            wb.close()
        except Exception as exc:
            log.warning("Could not read %s: %s", f.name, exc)
            rows = "?"
        result.append({
            "filename": f.name,
            "date": mtime.strftime("%d %b %Y"),
            "time": mtime.strftime("%H:%M"),
            "matched": rows,
            "size_kb": round(f.stat().st_size / 1024, 1),
        })
    return jsonify(result)


@app.get("/reports/<filename>")
def download_report(filename: str):
    """Serve an Excel file for download."""
    if not filename.startswith("opportunities_") or not filename.endswith(".xlsx"):
        abort(404)
    reports_dir = Path(config.OUTPUT_DIR).resolve()
    return send_from_directory(reports_dir, filename, as_attachment=True)


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=False)
