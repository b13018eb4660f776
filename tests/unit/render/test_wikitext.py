"""Unit tests for reading rendered pages back with mwparserfromhell."""

import random

import pytest

from formable_wiki.parsers.types import MultipleContributors, SingleContributor, TemplateData
from formable_wiki.render.template import render_document
from formable_wiki.render.wikitext import read_document, record_from_document, unwrap_flags

# =============================================================================
# READ DOCUMENT
# =============================================================================


class TestReadDocument:
    """Tests for read_document()."""

    @pytest.mark.unit
    def test_infobox_and_kind(self, rendered_page: str) -> None:
        """Should find the ConsideredFormable infobox."""
        document = read_document(rendered_page)

        assert document is not None
        assert document.kind == "formable"
        assert document.template_name == "ConsideredFormable"

    @pytest.mark.unit
    def test_params_in_page_order(self, rendered_page: str) -> None:
        """Should keep parameters in the order they appear."""
        document = read_document(rendered_page)

        assert document is not None
        assert list(document.params) == [
            "start_nation",
            "required",
            "continent",
            "demonym",
            "stab_gain",
            "decision_name",
            "alert_description",
            "suggested_by",
            "formable_modifier",
        ]
        assert document.params["demonym"] == "Rus"

    @pytest.mark.unit
    def test_description_and_tagline(self, rendered_page: str) -> None:
        """Should separate the description and the tagline from the frame."""
        document = read_document(rendered_page)

        assert document is not None
        assert document.description == "Kiev shines once more."
        assert document.tagline.startswith("'''Great Kievan Rus''' is a")
        assert "Navbox" not in document.tagline
        assert "ConsideredFormable" not in document.tagline

    @pytest.mark.unit
    def test_mission_page(self) -> None:
        """Should recognize mission pages."""
        document = read_document("{{ConsideredMission\n| pp_gain = 50\n}}")

        assert document is not None
        assert document.kind == "mission"
        assert document.params == {"pp_gain": "50"}

    @pytest.mark.unit
    def test_page_without_infobox(self) -> None:
        """Should return None for unrelated pages."""
        assert read_document("{{Stub}} Just some text.") is None


# =============================================================================
# RECORD FROM DOCUMENT
# =============================================================================


class TestRecordFromDocument:
    """Tests for record_from_document()."""

    @pytest.mark.unit
    def test_rebuilds_record(self, rendered_page: str) -> None:
        """Should unwrap flags and map parameters onto record fields."""
        record = record_from_document(rendered_page)

        assert record is not None
        assert record.name == "Great Kievan Rus"
        assert record.start_nation == "Russia"
        assert record.required_countries == "Russia, Ukraine, Belarus"
        assert record.required_tiles == ""
        assert record.continent == "Europe"
        assert record.demonym == "Rus"
        assert record.stability_gain == "15"
        assert record.decision_name == "Restore the Rus"
        assert record.formable_modifier == "Kievan Legacy"
        assert record.form_type == "releasable"
        assert record.suggested_by == MultipleContributors(("123456789012345678", "876543210987654321"))

    @pytest.mark.unit
    def test_placeholder_continent_becomes_auto(self) -> None:
        """Should map the placeholder continent back to auto."""
        record = record_from_document("{{ConsideredFormable\n| continent = {{Inferred}}\n}}")

        assert record is not None
        assert record.continent == "auto"

    @pytest.mark.unit
    def test_alert_description_from_description_template(self) -> None:
        """Should fall back to the Description template."""
        markup = "{{ConsideredFormable\n| demonym = Rus\n}}\n{{Description|Country forming description=Rise.}}"
        record = record_from_document(markup)

        assert record is not None
        assert record.alert_description == "Rise."

    @pytest.mark.unit
    def test_rendered_record_reads_back(self) -> None:
        """Should recover the fields a rendered page carries."""
        original = TemplateData(
            name="Unite Iberia",
            start_nation="Spain",
            required_countries="Portugal, Andorra",
            pp_gain="150",
            demonym="Iberian",
            suggested_by=SingleContributor("111111111111111111"),
            mission_modifier="Iberian Unity",
        )
        markup = render_document(original, "mission", rng=random.Random(0))
        record = record_from_document(markup)

        assert record is not None
        assert record.name == original.name
        assert record.start_nation == original.start_nation
        assert record.required_countries == original.required_countries
        assert record.pp_gain == "150"
        assert record.mission_modifier == "Iberian Unity"
        assert record.suggested_by == original.suggested_by
        assert record.continent == "Europe"

    @pytest.mark.unit
    def test_unwrap_flags(self) -> None:
        """Should pull country names out of flag macros."""
        value = "{{Flag|Name=Russia}}<br>\n{{Flag|Name=Ukraine}}<br><small>(TBD city required)</small>"
        assert unwrap_flags(value) == ["Russia", "Ukraine"]
