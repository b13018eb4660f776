"""Unit tests for the tokenized field extractor.

Covers each dialect rule in order of precedence:
1. Quoted value:        Key = "value"
2. Unquoted value:      Key = value
3. Attribute table:     ["Key"] = value
4. Colon array:         Key: [value]
5. Linear scan:         "Key": value
"""

import pytest

from formable_wiki.parsers.field import extract_field, locate_field

# =============================================================================
# QUOTED AND UNQUOTED VALUES
# =============================================================================


class TestQuotedValues:
    """Tests for rule 1 (quoted values)."""

    @pytest.mark.unit
    def test_double_quoted_value(self) -> None:
        """Should return the text between double quotes."""
        assert extract_field('FormableName = "Great Kievan Rus",', "FormableName") == "Great Kievan Rus"

    @pytest.mark.unit
    def test_single_quoted_value(self) -> None:
        """Should accept single quotes."""
        assert extract_field("Demonym = 'Rus'", "Demonym") == "Rus"

    @pytest.mark.unit
    def test_smart_quotes_are_folded(self) -> None:
        """Should read values wrapped in typographic quotes."""
        assert extract_field("FormableName = “Nordic Union”,", "FormableName") == "Nordic Union"

    @pytest.mark.unit
    def test_key_is_case_insensitive(self) -> None:
        """Should match the key regardless of case."""
        assert extract_field('formablename = "Rome"', "FormableName") == "Rome"

    @pytest.mark.unit
    def test_key_must_not_be_suffix_of_longer_word(self) -> None:
        """Should not match a key embedded in a longer identifier."""
        assert extract_field('OldFormableName = "Rome"', "FormableName") is None


class TestUnquotedValues:
    """Tests for rule 2 (unquoted values)."""

    @pytest.mark.unit
    def test_unquoted_value_runs_to_newline(self) -> None:
        """Should take everything up to the end of the line."""
        assert extract_field("MissionName = Unite Iberia\nNext = 1", "MissionName") == "Unite Iberia"

    @pytest.mark.unit
    def test_unquoted_value_stops_at_comma(self) -> None:
        """Should stop at a trailing comma."""
        assert extract_field("StabilityGain = 15, PPGain = 3", "StabilityGain") == "15"

    @pytest.mark.unit
    def test_block_value_is_not_a_scalar(self) -> None:
        """Should return None when the key holds a brace block."""
        assert extract_field('RequiredCountries = {"Russia"}', "RequiredCountries") is None

    @pytest.mark.unit
    def test_empty_quoted_value_is_absent(self) -> None:
        """Should treat an empty quoted value as missing."""
        assert extract_field('Demonym = ""', "Demonym") is None

    @pytest.mark.unit
    def test_wiki_parameter_line(self) -> None:
        """Should read '| key = value' lines from a wiki page."""
        text = "| formable_modifier = Kievan Legacy\n| demonym = Rus"
        assert extract_field(text, "formable_modifier") == "Kievan Legacy"

    @pytest.mark.unit
    def test_spaced_key_matches_any_whitespace(self) -> None:
        """Should match spaced keys across runs of whitespace."""
        assert extract_field("formable  modifier icon = 1234", "formable modifier icon") == "1234"


# =============================================================================
# ATTRIBUTE, COLON-ARRAY AND SCAN RULES
# =============================================================================


class TestAlternateDialects:
    """Tests for rules 3 to 5."""

    @pytest.mark.unit
    def test_bracketed_attribute_key(self) -> None:
        """Should read ["Key"] = value entries."""
        assert extract_field('["StabilityGain"] = 15,', "StabilityGain") == "15"

    @pytest.mark.unit
    def test_bracketed_attribute_quoted_value(self) -> None:
        """Should strip quotes from bracketed attribute values."""
        assert extract_field('["PP_Gain"] = "75"}', "PP_Gain") == "75"

    @pytest.mark.unit
    def test_colon_array(self) -> None:
        """Should read the colon-array dialect."""
        assert extract_field("Demonym: [Ilkhanid]", "Demonym") == "Ilkhanid"

    @pytest.mark.unit
    def test_empty_colon_array_is_absent(self) -> None:
        """Should treat empty brackets as a missing field."""
        assert extract_field("Demonym: []", "Demonym") is None

    @pytest.mark.unit
    def test_linear_scan_json_style(self) -> None:
        """Should fall back to scanning past a quoted key and colon."""
        assert extract_field('"FormableName": "Rome"', "FormableName") == "Rome"

    @pytest.mark.unit
    def test_missing_key_returns_none(self) -> None:
        """Should return None when no rule finds the key."""
        assert extract_field("Nothing to see here", "FormableName") is None

    @pytest.mark.unit
    def test_first_rule_wins(self) -> None:
        """Should prefer the quoted form over later bracketed forms."""
        text = 'Demonym = "Rus"\n["Demonym"] = Other'
        assert extract_field(text, "Demonym") == "Rus"


# =============================================================================
# LOCATE FIELD
# =============================================================================


class TestLocateField:
    """Tests for locate_field()."""

    @pytest.mark.unit
    def test_reports_value_and_offset(self) -> None:
        """Should report where the key starts."""
        match = locate_field('Name = "A"\nDemonym = "Kievan"\ntrailing', "Demonym")
        assert match is not None
        assert match.value == "Kievan"
        assert match.start == 11

    @pytest.mark.unit
    def test_end_is_just_past_value(self) -> None:
        """Should end right after the raw value."""
        text = 'Demonym = "Rus"\nmore'
        match = locate_field(text, "Demonym")
        assert match is not None
        assert text[: match.end] == 'Demonym = "Rus"'

    @pytest.mark.unit
    def test_bracketed_key(self) -> None:
        """Should find ["Demonym"] = value."""
        match = locate_field('["Demonym"] = "Rus"', "Demonym")
        assert match is not None
        assert match.value == "Rus"

    @pytest.mark.unit
    def test_colon_array_empty_value(self) -> None:
        """Should locate a field even when its value is empty."""
        match = locate_field("Demonym: []", "Demonym")
        assert match is not None
        assert match.value == ""

    @pytest.mark.unit
    def test_missing_field(self) -> None:
        """Should return None when the field is absent."""
        assert locate_field('FormableName = "Rome"', "Demonym") is None
