"""
Unit tests for category extraction and prefix comparison.
"""

import pytest

from matching.categories import (
    category_prefix,
    extract_categories,
    matching_codes,
    same_category,
    strip_code_prefix,
)
from matching.rules import MatchingRules


@pytest.mark.unit
class TestExtractCategories:

    def test_strips_version_prefix(self, make_tender):
        assert extract_categories(make_tender(category_codes=("V1.80111601",))) == ["80111601"]

    def test_plain_code_kept(self, make_tender):
        assert extract_categories(make_tender(category_codes=("72101500",))) == ["72101500"]

    def test_short_code_discarded(self, make_tender):
        assert extract_categories(make_tender(category_codes=("V1.801",))) == []
        assert extract_categories(make_tender(category_codes=("12",))) == []

    def test_four_characters_is_enough(self, make_tender):
        assert extract_categories(make_tender(category_codes=("8011",))) == ["8011"]

    def test_no_codes_gives_empty_list(self, make_tender):
        assert extract_categories(make_tender(category_codes=())) == []

    def test_duplicates_collapse_in_order(self, make_tender):
        tender = make_tender(category_codes=("V1.80111601", "80111601", "72101500"))
        assert extract_categories(tender) == ["80111601", "72101500"]

    def test_raw_feed_row_accepted(self):
        row = {"id_del_proceso": "CO1.REQ.9", "codigo_principal_de_categoria": "V1.43211500"}
        assert extract_categories(row) == ["43211500"]

    def test_raw_row_without_code(self):
        assert extract_categories({"id_del_proceso": "CO1.REQ.9"}) == []

    def test_garbage_input_does_not_raise(self):
        assert extract_categories(None) == []
        assert extract_categories({"codigo_principal_de_categoria": {"nested": "x"}}) == []

    def test_custom_prefix_rules(self, make_tender):
        rules = MatchingRules(code_prefixes=("V2.", "V1."))
        assert extract_categories(make_tender(category_codes=("V2.80111601",)), rules) == ["80111601"]


@pytest.mark.unit
class TestPrefixMatching:

    def test_codes_differing_after_position_four_match(self):
        assert same_category("80111600", "80111699")
        assert same_category("80111600", "8011")

    def test_codes_differing_within_four_do_not_match(self):
        assert not same_category("80111600", "80121600")
        assert not same_category("80111600", "70111600")

    def test_category_prefix(self):
        assert category_prefix("80111600") == "8011"

    def test_strip_code_prefix_leaves_other_codes(self):
        assert strip_code_prefix("80111600") == "80111600"
        assert strip_code_prefix(" V1.80111600 ") == "80111600"

    def test_matching_codes_returns_bidder_codes(self):
        matched = matching_codes(["80111600", "43211500", "V1.80121700"], ["80111601", "80121704"])
        assert matched == ["80111600", "80121700"]

    def test_matching_codes_empty_when_no_tender_categories(self):
        assert matching_codes(["80111600"], []) == []
