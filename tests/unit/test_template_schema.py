"""Tests for candidate data validation and schema snapshots."""

import pytest

from api.services.template_schema import (
    CandidateDataError,
    FieldDefinition,
    InvalidEnum,
    InvalidFormat,
    InvalidType,
    MissingRequiredField,
    UnknownField,
    UnknownFieldType,
    parse_date,
    snapshot_schema,
    validate_candidate_data,
)


class TestRequiredFields:
    """Required keys and blank values."""

    def test_missing_required_field(self):
        schema = [{"key": "fullName", "type": "text", "required": True}]
        with pytest.raises(MissingRequiredField) as exc_info:
            validate_candidate_data({}, schema)
        assert exc_info.value.key == "fullName"

    def test_empty_string_counts_as_missing(self):
        schema = [{"key": "fullName", "type": "text", "required": True}]
        with pytest.raises(MissingRequiredField):
            validate_candidate_data({"fullName": ""}, schema)

    def test_null_optional_field_is_skipped(self):
        schema = [{"key": "phone", "type": "number"}]
        validate_candidate_data({"phone": None}, schema)

    def test_empty_schema_accepts_anything(self):
        validate_candidate_data({"anything": 1}, [])


class TestFieldTypes:
    """Per-type checks."""

    def test_number_given_as_string(self):
        """A numeric string is not a number."""
        schema = [{"key": "age", "type": "number", "required": True}]
        with pytest.raises(InvalidType) as exc_info:
            validate_candidate_data({"age": "30"}, schema)
        assert exc_info.value.key == "age"
        assert exc_info.value.expected == "number"

    def test_select_outside_options(self):
        schema = [{"key": "level", "type": "select", "required": True, "options": ["Jr", "Sr"]}]
        with pytest.raises(InvalidEnum) as exc_info:
            validate_candidate_data({"level": "Mid"}, schema)
        assert exc_info.value.key == "level"
        assert exc_info.value.allowed == ["Jr", "Sr"]

    def test_select_without_options_rejects_every_value(self):
        schema = [{"key": "level", "type": "select"}]
        with pytest.raises(InvalidEnum):
            validate_candidate_data({"level": "Jr"}, schema)

    def test_boolean_is_not_a_number(self):
        schema = [{"key": "experience", "type": "number"}]
        with pytest.raises(InvalidType):
            validate_candidate_data({"experience": True}, schema)

    def test_float_is_a_number(self):
        validate_candidate_data({"experience": 2.5}, [{"key": "experience", "type": "number"}])

    def test_text_rejects_non_strings(self):
        with pytest.raises(InvalidType):
            validate_candidate_data({"bio": 12}, [{"key": "bio", "type": "textarea"}])

    @pytest.mark.parametrize("value", ["jane@example.com", "a.b+c@mail.co.uk"])
    def test_valid_email(self, value):
        validate_candidate_data({"email": value}, [{"key": "email", "type": "email"}])

    @pytest.mark.parametrize(
        "value", ["jane", "jane@", "jane@example", "ja ne@example.com", "jane@example.com\n", 42]
    )
    def test_invalid_email(self, value):
        with pytest.raises(InvalidFormat) as exc_info:
            validate_candidate_data({"email": value}, [{"key": "email", "type": "email"}])
        assert exc_info.value.expected == "email"

    @pytest.mark.parametrize("value", ["2024-03-01", "2024-03-01T10:30:00", "2024-03-01T10:30:00Z"])
    def test_valid_date(self, value):
        validate_candidate_data({"start": value}, [{"key": "start", "type": "date"}])

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-01", 20240301])
    def test_invalid_date(self, value):
        with pytest.raises(InvalidFormat):
            validate_candidate_data({"start": value}, [{"key": "start", "type": "date"}])

    def test_unknown_field_type(self):
        schema = [{"key": "photo", "type": "file"}]
        with pytest.raises(UnknownFieldType):
            validate_candidate_data({"photo": "x.png"}, schema)

    def test_record_filling_every_field_type(self):
        schema = [
            {"key": "fullName", "type": "text", "required": True},
            {"key": "summary", "type": "textarea", "required": True},
            {"key": "email", "type": "email", "required": True},
            {"key": "experience", "type": "number", "required": True},
            {"key": "availableFrom", "type": "date", "required": True},
            {"key": "level", "type": "select", "required": True, "options": ["Jr", "Sr"]},
        ]
        data = {
            "fullName": "Jane Doe",
            "summary": "Ten years of backend work.\nLikes Python.",
            "email": "jane@example.com",
            "experience": 7.5,
            "availableFrom": "2024-06-01",
            "level": "Sr",
        }

        validate_candidate_data(data, schema)


class TestFailureOrder:
    """The first failure in schema order wins, unknown keys last."""

    def test_schema_order_decides_first_error(self):
        schema = [
            {"key": "fullName", "type": "text", "required": True},
            {"key": "age", "type": "number", "required": True},
        ]
        with pytest.raises(MissingRequiredField) as exc_info:
            validate_candidate_data({"age": "old"}, schema)
        assert exc_info.value.key == "fullName"

    def test_unknown_key_reported_after_schema_checks(self):
        schema = [{"key": "age", "type": "number", "required": True}]
        with pytest.raises(InvalidType):
            validate_candidate_data({"nickname": "J", "age": "30"}, schema)

        with pytest.raises(UnknownField) as exc_info:
            validate_candidate_data({"nickname": "J", "age": 30}, schema)
        assert exc_info.value.key == "nickname"

    def test_errors_carry_api_details(self):
        schema = [{"key": "age", "type": "number", "required": True}]
        with pytest.raises(CandidateDataError) as exc_info:
            validate_candidate_data({"age": "30"}, schema)
        error = exc_info.value
        assert error.status_code == 422
        assert error.code == "VALIDATION_ERROR"
        assert error.details["field"] == "age"
        assert error.details["reason"] == "type"


class TestSnapshotSchema:
    """Copying schemas onto vacancies."""

    def test_snapshot_is_independent_of_source(self):
        source = [{"key": "level", "type": "select", "required": True, "options": ["Jr", "Sr"]}]
        copy = snapshot_schema(source)

        source[0]["options"].append("Lead")
        source[0]["required"] = False

        assert copy == [{"key": "level", "type": "select", "required": True, "options": ["Jr", "Sr"]}]

    def test_snapshot_drops_empty_optional_parts(self):
        assert snapshot_schema([{"key": "name", "type": "text"}]) == [
            {"key": "name", "type": "text", "required": False}
        ]

    def test_snapshot_of_nothing(self):
        assert snapshot_schema(None) == []

    def test_field_definition_accepts_definitions(self):
        definition = FieldDefinition(key="age", type="number", required=True)
        assert FieldDefinition.from_raw(definition) is definition


def test_parse_date_accepts_trailing_z():
    parsed = parse_date("2024-03-01T10:30:00Z")
    assert parsed.utcoffset().total_seconds() == 0
