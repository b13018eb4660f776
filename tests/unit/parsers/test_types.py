"""Unit tests for record, contributor and parse-result types."""

import pytest

from formable_wiki.parsers.types import (
    EDITABLE_SCALAR_FIELDS,
    MessageMetadata,
    MultipleContributors,
    ParseFailure,
    ParseSuccess,
    SingleContributor,
    TemplateData,
    contributor_ids,
    edit_record,
    suggested_by_from_ids,
)

# =============================================================================
# CONTRIBUTORS
# =============================================================================


class TestContributorVariant:
    """Tests for the single/multiple contributor variant."""

    @pytest.mark.unit
    def test_no_ids(self) -> None:
        """Should return None for an empty id list."""
        assert suggested_by_from_ids([]) is None

    @pytest.mark.unit
    def test_one_id(self) -> None:
        """Should return the single variant for one id."""
        assert suggested_by_from_ids(["1"]) == SingleContributor("1")

    @pytest.mark.unit
    def test_several_ids(self) -> None:
        """Should return the multiple variant for two or more ids."""
        assert suggested_by_from_ids(["1", "2"]) == MultipleContributors(("1", "2"))

    @pytest.mark.unit
    def test_flatten(self) -> None:
        """Should flatten either variant into a list."""
        assert contributor_ids(None) == []
        assert contributor_ids(SingleContributor("1")) == ["1"]
        assert contributor_ids(MultipleContributors(("1", "2"))) == ["1", "2"]


# =============================================================================
# SERIALIZATION
# =============================================================================


class TestSerialization:
    """Tests for to_dict() on records and results."""

    @pytest.mark.unit
    def test_record_suggested_by_shapes(self) -> None:
        """Should serialize one contributor as a string and several as a list."""
        assert TemplateData().to_dict()["suggested_by"] == ""
        assert TemplateData(suggested_by=SingleContributor("1")).to_dict()["suggested_by"] == "1"
        assert TemplateData(suggested_by=MultipleContributors(("1", "2"))).to_dict()["suggested_by"] == ["1", "2"]

    @pytest.mark.unit
    def test_record_defaults(self) -> None:
        """Should default scalars to empty strings and continent to auto."""
        data = TemplateData().to_dict()
        assert data["name"] == ""
        assert data["continent"] == "auto"
        assert data["form_type"] == "regular"

    @pytest.mark.unit
    def test_success_to_dict(self) -> None:
        """Should use the camelCase wire keys."""
        result = ParseSuccess(
            raw_content="raw",
            data=TemplateData(name="Rus"),
            metadata=MessageMetadata(timestamp="01/02/2024"),
            warnings=("Missing or empty expected fields: required_tiles",),
        )
        payload = result.to_dict()
        assert result.success is True
        assert payload["success"] is True
        assert payload["rawContent"] == "raw"
        assert payload["extractedData"]["name"] == "Rus"
        assert payload["metadata"] == {"suggestedBy": None, "primaryContributorId": None, "timestamp": "01/02/2024"}
        assert payload["warnings"] == ["Missing or empty expected fields: required_tiles"]

    @pytest.mark.unit
    def test_failure_to_dict(self) -> None:
        """Should carry the error text and kind."""
        result = ParseFailure(raw_content="", error="Input is empty.", kind="empty_input")
        assert result.success is False
        assert result.to_dict() == {
            "success": False,
            "rawContent": "",
            "error": "Input is empty.",
            "errorKind": "empty_input",
        }


# =============================================================================
# EDITING
# =============================================================================


class TestEditRecord:
    """Tests for edit_record()."""

    @pytest.mark.unit
    def test_scalar_edit_returns_copy(self) -> None:
        """Should return an edited copy and leave the original alone."""
        original = TemplateData(name="Rus")
        edited = edit_record(original, {"population": "1.2M", "continent": "Europe"})
        assert edited.population == "1.2M"
        assert edited.continent == "Europe"
        assert original.population == ""

    @pytest.mark.unit
    def test_form_type_edit(self) -> None:
        """Should accept a valid form type."""
        assert edit_record(TemplateData(), {"form_type": "releasable"}).form_type == "releasable"

    @pytest.mark.unit
    def test_invalid_form_type(self) -> None:
        """Should reject an unknown form type."""
        with pytest.raises(ValueError, match="form_type"):
            edit_record(TemplateData(), {"form_type": "puppet"})

    @pytest.mark.unit
    def test_unknown_field(self) -> None:
        """Should reject fields the record does not have."""
        with pytest.raises(ValueError, match="Unknown field"):
            edit_record(TemplateData(), {"capital": "Kiev"})

    @pytest.mark.unit
    def test_suggested_by_not_editable(self) -> None:
        """Should not allow overwriting contributors with a string."""
        assert "suggested_by" not in EDITABLE_SCALAR_FIELDS
        with pytest.raises(ValueError):
            edit_record(TemplateData(), {"suggested_by": "someone"})
