"""
config.py — reads all settings from my_profile.yaml and exposes them
as the constants that the rest of the application uses.

You should NOT need to edit this file.
Edit my_profile.yaml instead (or point TENDER_PROFILE at another file).
"""

import os
import sys

import yaml

from matching.rules import MatchingRules
from procurement.ingest import profile_from_dict

# ── Load my_profile.yaml ──────────────────────────────────────────────────────

_HERE = os.path.dirname(os.path.abspath(__file__))
_PROFILE_FILE = os.environ.get("TENDER_PROFILE") or os.path.join(_HERE, "my_profile.yaml")

if not os.path.exists(_PROFILE_FILE):
    print(
        "ERROR: my_profile.yaml not found.\n"
        f"Expected it at: {_PROFILE_FILE}\n"
        "Please make sure the file exists and try again."
    )
    sys.exit(1)

with open(_PROFILE_FILE, encoding="utf-8") as _f:
    _p = yaml.safe_load(_f) or {}

PROFILE_FILE = _PROFILE_FILE

# ── Bidder profile ────────────────────────────────────────────────────────────

BIDDER_PROFILE = profile_from_dict({
    "name": _p.get("company_name", "Bidder"),
    "category_codes": _p.get("category_codes", []),
    "financial_indicators": _p.get("financial_indicators"),
    "capacity": _p.get("capacity"),
})

# ── Matching rules (vocabularies, weights, thresholds) ────────────────────────

MATCHING_RULES = MatchingRules.from_dict(_p.get("matching_rules"))

# ── Input files (defaults for main.py) ────────────────────────────────────────

_inputs = _p.get("inputs", {}) or {}
CONTRACTS_FILE = _inputs.get("contracts_file", "")
HINTS_FILE     = _inputs.get("hints_file", "")

# ── Analysis ──────────────────────────────────────────────────────────────────

DEFAULT_MIN_SCORE = int(_p.get("minimum_match_score", 0))
HINT_BATCH_SIZE   = int(_p.get("classifier_batch_size", 20))
MAX_WORKERS       = int(_p.get("max_workers", 4))
TOP_N             = 30

# ── Output ────────────────────────────────────────────────────────────────────

OUTPUT_DIR      = str(_p.get("output_dir", "reports"))
OUTPUT_FILENAME = "opportunities_{date}.xlsx"
