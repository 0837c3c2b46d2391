"""
main.py — entry point for the opportunity matcher.

Scores a snapshot of SECOP II processes against the bidder profile in
my_profile.yaml, prints a ranked summary and writes an Excel report.

Usage:
    python main.py --tenders feed.json                      # Analyse and export
    python main.py --tenders feed.json --contracts c.json   # With contract history
    python main.py --tenders feed.json --hints hints.json   # With classifier hints
    python main.py --tenders feed.json --score 60           # Only show score >= 60
    python main.py --tenders feed.json --dry-run            # Console only, no Excel
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import Any, List, Optional

# ── Logging setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  —  %(message)s",
    datefmt="%H:%M:%S",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler("matcher.log", encoding="utf-8"),
    ],
)
logger = logging.getLogger("main")

# ── Project imports ───────────────────────────────────────────────────────────
import config
from matching.analyzer import AnalyzedTender, analyze_all, resolve_capacity
from matching.hints import hints_from_mapping
from matching.insights import headline, portfolio_stats
from matching.ranking import rank
from output_engine.excel_exporter import export_to_excel
from procurement.ingest import contracts_from_rows, tenders_from_feed
from procurement.models import format_cop


class InputError(Exception):
    """An input file is missing or not the JSON shape we expect."""


def _load_json(path: str, expected: type) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise InputError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, expected):
        raise InputError(f"{path} must contain a JSON {expected.__name__}")
    return data


def run_analysis(
    tenders_path: str,
    contracts_path: Optional[str] = None,
    hints_path: Optional[str] = None,
    min_score: int = 0,
    dry_run: bool = False,
    output_dir: Optional[str] = None,
) -> Optional[str]:
    """
    Full cycle:  load → analyse → rank → summary → export.
    Returns the path to the saved Excel file, or None on dry-run / no input.
    """
    run_start = datetime.now()
    logger.info("=" * 60)
    logger.info("Opportunity matcher starting at %s", run_start.strftime("%d %b %Y %H:%M:%S"))
    logger.info("=" * 60)

    # ── 1. Load inputs ────────────────────────────────────────────────────────
    tenders = tenders_from_feed(_load_json(tenders_path, list))
    contracts = contracts_from_rows(_load_json(contracts_path, list)) if contracts_path else []
    hints = hints_from_mapping(_load_json(hints_path, dict)) if hints_path else {}

    logger.info(
        "Loaded %d tender(s), %d contract(s), %d classifier hint(s)",
        len(tenders), len(contracts), len(hints),
    )

    if not tenders:
        logger.warning("No tenders in %s. Nothing to analyse.", tenders_path)
        return None

    # ── 2. Analyse & rank ─────────────────────────────────────────────────────
    profile = config.BIDDER_PROFILE
    analyzed = analyze_all(
        tenders, profile, contracts, hints,
        rules=config.MATCHING_RULES,
        max_workers=config.MAX_WORKERS,
    )
    ranked = rank(analyzed)
    shown = [a for a in ranked if a.analysis.score >= min_score]
    matched = [a for a in shown if a.analysis.match]

    # ── 3. Console summary ────────────────────────────────────────────────────
    _print_summary(shown, ranked, run_start)

    if dry_run:
        logger.info("Dry-run mode — no Excel file saved.")
        return None

    # ── 4. Export to Excel ────────────────────────────────────────────────────
    filepath = export_to_excel(matched, shown, output_dir=output_dir)
    logger.info("Report saved: %s", filepath)
    return filepath


def _print_summary(shown: List[AnalyzedTender], ranked: List[AnalyzedTender], run_start: datetime) -> None:
    """Print a readable summary table to stdout."""
    elapsed = (datetime.now() - run_start).seconds
    stats = portfolio_stats(ranked)
    capacity = resolve_capacity(config.BIDDER_PROFILE)

    print()
    print("━" * 72)
    print(f"  OPPORTUNITY MATCHER  —  {datetime.now().strftime('%d %b %Y')}")
    print("━" * 72)
    print(f"  Bidder        : {config.BIDDER_PROFILE.name}")
    print(f"  Capacity (K)  : {format_cop(capacity) if capacity is not None else 'not configured'}")
    print(f"  Analysed      : {len(ranked):>4}")
    print(f"  Matches       : {sum(1 for a in ranked if a.analysis.match):>4}")
    print(f"  Opportunities : {stats['opportunities']:>4}   (score >= 70)")
    print(f"  Risks         : {stats['risks']:>4}   (score 30-69)")
    print(f"  Average score : {stats['avg_score']:>4}")
    print(f"  Elapsed       : {elapsed}s")
    print("━" * 72)

    if not shown:
        print("  No processes above the minimum score. Try lowering --score.")
        print()
        return

    print(f"  {'#':>3}  {'Score':>7}  {'Open':<4}  {'Corp':<4}  {'Description':<38}  {'Budget'}")
    print(f"  {'─'*3}  {'─'*7}  {'─'*4}  {'─'*4}  {'─'*38}  {'─'*16}")

    for i, item in enumerate(shown[:config.TOP_N], 1):
        t, a = item.tender, item.analysis
        score_str = f"{a.score:>3}/100"
        desc = (t.description[:37] + "…") if len(t.description) > 38 else t.description.ljust(38)
        print(f"  {i:>3}  {score_str}  {'yes' if a.actionable else 'no':<4}  "
              f"{'yes' if a.corporate else 'no':<4}  {desc}  {t.display_budget()}")

    if len(shown) > config.TOP_N:
        print(f"  … and {len(shown) - config.TOP_N} more — see the Excel file for full list.")

    print()
    print("  Top 3 (open these first):")
    for item in shown[:3]:
        t, a = item.tender, item.analysis
        print(f"    [{a.score}/100]  {t.description[:80]}")
        print(f"           Entity : {t.entity}")
        print(f"           Budget : {t.display_budget()}")
        print(f"           Why    : {headline(a)}")
        print(f"           Advice : {a.advice}")
        print(f"           URL    : {t.url}")
        print()
    print("━" * 72)


# ── CLI ───────────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(
        description="Public procurement opportunity matcher — SECOP II"
    )
    parser.add_argument(
        "--tenders",
        required=True,
        help="JSON file with a list of SECOP II process rows",
    )
    parser.add_argument(
        "--contracts",
        default=None,
        help="JSON file with your past contracts (default: read from my_profile.yaml)",
    )
    parser.add_argument(
        "--hints",
        default=None,
        help="JSON file mapping process id → classifier hint (default: read from my_profile.yaml)",
    )
    parser.add_argument(
        "--score",
        type=int,
        default=None,
        help="Minimum score to include in report (default: read from my_profile.yaml)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print results to console only — do not save Excel",
    )
    args = parser.parse_args()

    min_score = args.score if args.score is not None else config.DEFAULT_MIN_SCORE

    try:
        run_analysis(
            args.tenders,
            contracts_path=args.contracts or config.CONTRACTS_FILE or None,
            hints_path=args.hints or config.HINTS_FILE or None,
            min_score=min_score,
            dry_run=args.dry_run,
        )
    except InputError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
