"""
Unit Tests for Greeklish transliteration and safe file names.
"""

import pytest

from modules.backend.documents.greeklish import (
    create_safe_filename,
    sanitize_filename,
    to_greeklish,
)


class TestToGreeklish:
    """Tests for to_greeklish."""

    @pytest.mark.parametrize(
        ("greek", "latin"),
        [
            ("ΑΘΗΝΑ", "ATHINA"),
            ("καλημέρα", "kalimera"),
            ("ΕΥΡΩΠΗ", "EUROPI"),
            ("ΝΤΟΜΑΤΑ", "DOMATA"),
            ("ΤΣΑΙ", "TSAI"),
            ("ψυχή", "psychi"),
            ("Πάτρα", "Patra"),
        ],
    )
    def test_transliterates(self, greek, latin):
        assert to_greeklish(greek) == latin

    def test_digraphs_before_letters(self):
        assert to_greeklish("ουρανός") == "ouranos"

    def test_latin_and_digits_pass_through(self):
        assert to_greeklish("LL001 Cisco") == "LL001 Cisco"

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty(self, empty):
        assert to_greeklish(empty) == ""


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    def test_keeps_extension(self):
        assert sanitize_filename("Προσφορά #1 (τελική).pdf") == "Prosfora_1_teliki.pdf"

    def test_without_extension(self):
        assert sanitize_filename("report.final", preserve_extension=False) == "report_final"

    def test_collapses_whitespace(self):
        assert sanitize_filename("  site   survey  .docx") == "site_survey.docx"

    def test_nothing_left_becomes_unnamed(self):
        assert sanitize_filename("###.pdf") == "unnamed.pdf"

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty(self, empty):
        assert sanitize_filename(empty) == "unnamed"

    def test_truncates_to_max_length(self):
        result = sanitize_filename("a" * 300 + ".xlsx", max_length=20)

        assert len(result) == 20
        assert result.endswith(".xlsx")


class TestCreateSafeFilename:
    """Tests for create_safe_filename."""

    def test_greek_reference_with_version(self):
        assert create_safe_filename("ΠΕΛΑΤΗΣ ΑΕ", "BOM", 3) == "PELATIS_AE - BOM - v3.xlsx"

    def test_without_version(self):
        assert create_safe_filename("LL001", "BOM", extension=".xlsx") == "LL001 - BOM.xlsx"

    def test_extension_dot_added(self):
        assert create_safe_filename("Hotel", "Site Survey", extension="docx") == "Hotel - Site_Survey.docx"

    def test_no_extension(self):
        assert create_safe_filename("LL001", "BOM", extension="") == "LL001 - BOM"
