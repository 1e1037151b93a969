"""
tests/test_port_parser.py
Unit tests for core/port_parser.py: specs, ranges, top-N and --ports/--top-ports union.
Run: pytest tests/test_port_parser.py -v
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from core.port_parser import PortParser, PortParseError, parse_ports, top_ports
from utils.constants import TOP_PORTS


@pytest.fixture
def parser():
    return PortParser()


# ── Single / list ─────────────────────────────────────────────────────────────

class TestSinglePort:
    def test_min_port(self, parser):              assert parser.parse("1") == [1]
    def test_max_port(self, parser):              assert parser.parse("65535") == [65535]
    def test_echo_port(self, parser):             assert parser.parse("7") == [7]

    def test_zero_is_invalid(self, parser):
        with pytest.raises(PortParseError, match="out of valid range"):
            parser.parse("0")

    def test_above_max_is_invalid(self, parser):
        with pytest.raises(PortParseError, match="out of valid range"):
            parser.parse("65536")

    def test_negative_port_is_invalid(self, parser):
        with pytest.raises(PortParseError, match="Invalid port token"):
            parser.parse("-80")

    def test_float_is_invalid(self, parser):
        with pytest.raises(PortParseError, match="Invalid port token"):
            parser.parse("80.5")


class TestPortLists:
    def test_sorted_and_deduped(self, parser):
        assert parser.parse("443,22,80,22") == [22, 80, 443]

    def test_whitespace_and_trailing_comma(self, parser):
        assert parser.parse("  80 , 443 , ") == [80, 443]

    def test_only_commas_rejected(self, parser):
        with pytest.raises(PortParseError, match="No valid ports"):
            parser.parse(",,,")


# ── Ranges ────────────────────────────────────────────────────────────────────

class TestRanges:
    def test_small_range(self, parser):
        assert parser.parse("7-9") == [7, 8, 9]

    def test_single_element_range(self, parser):
        assert parser.parse("80-80") == [80]

    def test_reversed_range_invalid(self, parser):
        with pytest.raises(PortParseError, match="start > end"):
            parser.parse("100-50")

    def test_range_past_max_invalid(self, parser):
        with pytest.raises(PortParseError, match="out of valid range"):
            parser.parse("65534-65537")

    def test_overlapping_range_and_port(self, parser):
        assert parser.parse("20-23,22,1024") == [20, 21, 22, 23, 1024]

    def test_all_ports_keyword(self, parser):
        result = parser.parse("-")
        assert result[0] == 1
        assert result[-1] == 65535
        assert len(result) == 65535


# ── Top-N ─────────────────────────────────────────────────────────────────────

class TestTopN:
    def test_top_list_is_unique_and_100_long(self):
        assert len(TOP_PORTS) == 100
        assert len(set(TOP_PORTS)) == 100

    def test_top10_keyword(self, parser):
        ports = parser.parse("top10")
        assert ports == sorted(TOP_PORTS[:10])

    def test_top_keyword_case_insensitive(self, parser):
        assert parser.parse("TOP5") == parser.parse("top5")

    def test_top_mixed_with_ports(self, parser):
        ports = parser.parse("top1,7")
        assert ports == [7, 80]

    def test_top_more_than_known_is_capped(self, parser):
        assert len(parser.top(5000)) == 100

    def test_top0_invalid(self, parser):
        with pytest.raises(PortParseError):
            parser.parse("top0")

    def test_custom_table(self):
        p = PortParser(top_ports=[9000, 22, 80])
        assert p.top(2) == [22, 9000]


class TestCombine:
    def test_union_of_ports_and_top(self, parser):
        assert parser.combine("7-9", 1) == [7, 8, 9, 80]

    def test_top_only(self, parser):
        assert parser.combine(None, 3) == sorted(TOP_PORTS[:3])

    def test_spec_only(self, parser):
        assert parser.combine("22", None) == [22]

    def test_nothing_requested(self, parser):
        with pytest.raises(PortParseError, match="No ports"):
            parser.combine(None, None)

    def test_bool_count_rejected(self, parser):
        with pytest.raises(PortParseError):
            parser.top(True)


# ── Validation / edge cases ───────────────────────────────────────────────────

class TestEdgeCases:
    def test_validate_ok(self, parser):
        assert parser.validate("80,443") == (True, "")

    def test_validate_reports_bad_port(self, parser):
        ok, msg = parser.validate("99999")
        assert ok is False
        assert "99999" in msg

    def test_empty_string(self, parser):
        with pytest.raises(PortParseError, match="empty"):
            parser.parse("   ")

    def test_non_string(self, parser):
        with pytest.raises(PortParseError, match="Expected string"):
            parser.parse([80, 443])

    def test_shell_metachars(self, parser):
        with pytest.raises(PortParseError):
            parser.parse("80; rm -rf /")

    def test_module_helpers(self):
        assert parse_ports("22,21") == [21, 22]
        assert top_ports(2) == sorted(TOP_PORTS[:2])


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
