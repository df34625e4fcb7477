"""Unit tests for the field validator (no database)."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from headless_cms.errors import (
    ConstraintViolationError,
    DuplicateValueError,
    MissingRequiredError,
    TypeMismatchError,
    UnknownFieldError,
)
from headless_cms.schema.registry import ContentSchema, FieldDefinition
from headless_cms.validation import FieldValidator
from headless_cms.validation.fields import coerce_default, is_request_uri


class FakeUniqueness:
    """Stores (entry_id, field, value) rows and counts matches."""

    def __init__(self, rows: Optional[List[Tuple[str, str, Any]]] = None):
        self.rows = rows or []
        self.calls: List[Dict[str, Any]] = []

    def count_entries_where(self, content_type_id, field_name, value, exclude_id=None):
        self.calls.append(
            {"field": field_name, "value": value, "exclude_id": exclude_id}
        )
        return sum(
            1
            for entry_id, name, stored in self.rows
            if name == field_name and stored == value and entry_id != exclude_id
        )


def make_schema(*fields: FieldDefinition) -> ContentSchema:
    return ContentSchema(id="ct-1", name="Test", slug="test", fields=tuple(fields))


def field(name: str, type: str, **kwargs) -> FieldDefinition:
    return FieldDefinition(name=name, type=type, **kwargs)


class TestRequiredAndDefaults:
    """Tests for presence rules and default injection."""

    def test_missing_required_field(self):
        schema = make_schema(field("title", "string", required=True))
        with pytest.raises(MissingRequiredError) as exc_info:
            FieldValidator().validate(schema, {})
        assert exc_info.value.field == "title"
        assert exc_info.value.code == "MISSING_REQUIRED"

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty_values_count_as_missing(self, empty):
        schema = make_schema(field("title", "string", required=True))
        with pytest.raises(MissingRequiredError):
            FieldValidator().validate(schema, {"title": empty})

    def test_optional_field_may_be_absent(self):
        schema = make_schema(field("body", "text"))
        assert FieldValidator().validate(schema, {}) == {}

    def test_default_is_injected(self):
        schema = make_schema(field("status_text", "string", default_value="hello"))
        assert FieldValidator().validate(schema, {}) == {"status_text": "hello"}

    def test_defaults_coerced_to_declared_type(self):
        schema = make_schema(
            field("count", "number", default_value="3"),
            field("ratio", "number", default_value="0.5"),
            field("featured", "boolean", default_value="true"),
        )
        result = FieldValidator().validate(schema, {})
        assert result == {"count": 3, "ratio": 0.5, "featured": True}

    def test_validation_is_idempotent(self):
        schema = make_schema(
            field("title", "string", required=True),
            field("count", "number", default_value="3"),
            field("featured", "boolean", default_value="false"),
        )
        validator = FieldValidator()
        once = validator.validate(schema, {"title": "Hello"})
        twice = validator.validate(schema, once)
        assert once == twice == {"title": "Hello", "count": 3, "featured": False}

    def test_input_mapping_is_not_mutated(self):
        schema = make_schema(field("body", "text", default_value="x"))
        data: Dict[str, Any] = {}
        FieldValidator().validate(schema, data)
        assert data == {}

    def test_unknown_field_rejected(self):
        schema = make_schema(field("title", "string"))
        with pytest.raises(UnknownFieldError):
            FieldValidator().validate(schema, {"title": "ok", "extra": 1})


class TestStringValidation:
    """Tests for string/text length, pattern and slug rules."""

    def test_requires_string(self):
        schema = make_schema(field("title", "string"))
        with pytest.raises(TypeMismatchError):
            FieldValidator().validate(schema, {"title": 42})

    def test_length_counts_characters_not_bytes(self):
        schema = make_schema(field("title", "string", max_length=5))
        # 5 characters, 10 bytes in UTF-8
        FieldValidator().validate(schema, {"title": "ééééé"})
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"title": "éééééé"})

    def test_min_length(self):
        schema = make_schema(field("title", "text", min_length=3))
        with pytest.raises(ConstraintViolationError) as exc_info:
            FieldValidator().validate(schema, {"title": "ab"})
        assert exc_info.value.constraint == "min_length"

    def test_pattern_mismatch(self):
        schema = make_schema(field("code", "string", pattern=r"^[A-Z]{3}$"))
        FieldValidator().validate(schema, {"code": "ABC"})
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"code": "abc"})

    def test_slug_pattern_and_builtin_slug_check_both_fail(self):
        schema = make_schema(field("slug", "string", pattern=r"^[a-z]+$"))
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"slug": "abc-1"})

    def test_slug_builtin_check_without_pattern(self):
        schema = make_schema(field("slug", "string"))
        FieldValidator().validate(schema, {"slug": "hello-world-2"})
        for bad in ("Hello", "a--b", "-a", "a_b", "a b"):
            with pytest.raises(ConstraintViolationError):
                FieldValidator().validate(schema, {"slug": bad})

    @pytest.mark.parametrize("value", ["abc\n", "abc\r\n", "\nabc"])
    def test_slug_must_match_the_whole_value(self, value):
        schema = make_schema(field("slug", "string"))
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"slug": value})

    def test_constraints_ignored_for_other_types(self):
        schema = make_schema(field("count", "number", min_length=10, pattern="^x$"))
        FieldValidator().validate(schema, {"count": 1})


class TestTypedValues:
    """Tests for email, url, number, boolean, date and media types."""

    def test_email(self):
        schema = make_schema(field("email", "email"))
        FieldValidator().validate(schema, {"email": "a.b+c@example.co"})
        for bad in ("plain", "a@b", "a@b.c", "@b.com"):
            with pytest.raises(ConstraintViolationError):
                FieldValidator().validate(schema, {"email": bad})

    @pytest.mark.parametrize(
        "value",
        ["https://example.com/a?b=1", "http://localhost:8000", "/uploads/a.png", "mailto:x@y.z"],
    )
    def test_url_accepts_request_uris(self, value):
        assert is_request_uri(value)

    @pytest.mark.parametrize("value", ["example.com", "not a url", "", "relative/path"])
    def test_url_rejects_non_request_uris(self, value):
        assert not is_request_uri(value)

    def test_url_field(self):
        schema = make_schema(field("link", "url"))
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"link": "example.com"})
        with pytest.raises(TypeMismatchError):
            FieldValidator().validate(schema, {"link": 5})

    def test_number_accepts_int_and_float(self):
        schema = make_schema(field("n", "number", min_value=0, max_value=10))
        FieldValidator().validate(schema, {"n": 0})
        FieldValidator().validate(schema, {"n": 10})
        FieldValidator().validate(schema, {"n": 2.5})

    def test_number_range_is_inclusive(self):
        schema = make_schema(field("n", "number", min_value=0, max_value=10))
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"n": -0.1})
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"n": 10.5})

    @pytest.mark.parametrize("value", [True, "5", [1]])
    def test_number_rejects_non_numbers(self, value):
        schema = make_schema(field("n", "number"))
        with pytest.raises(TypeMismatchError):
            FieldValidator().validate(schema, {"n": value})

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), 10**400])
    def test_number_must_be_finite(self, value):
        schema = make_schema(field("rating", "number", min_value=0, max_value=5))
        with pytest.raises(ConstraintViolationError) as exc_info:
            FieldValidator().validate(schema, {"rating": value})
        assert exc_info.value.constraint == "finite"

    def test_unbounded_number_must_still_be_finite(self):
        schema = make_schema(field("n", "number"))
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate_partial(schema, {"n": float("nan")})

    def test_trailing_newline_rejected(self):
        schema = make_schema(field("email", "email"), field("day", "date"))
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"email": "a@b.com\n"})
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"day": "2024-02-29\n"})

    def test_boolean_has_no_string_coercion(self):
        schema = make_schema(field("flag", "boolean"))
        FieldValidator().validate(schema, {"flag": False})
        with pytest.raises(TypeMismatchError):
            FieldValidator().validate(schema, {"flag": "true"})
        with pytest.raises(TypeMismatchError):
            FieldValidator().validate(schema, {"flag": 1})

    def test_date(self):
        schema = make_schema(field("day", "date"))
        FieldValidator().validate(schema, {"day": "2024-02-29"})
        for bad in ("2023-02-29", "2024-2-1", "01/02/2024", "2024-01-01T00:00:00"):
            with pytest.raises(ConstraintViolationError):
                FieldValidator().validate(schema, {"day": bad})

    def test_media_requires_resolved_url(self):
        schema = make_schema(field("cover", "media"))
        FieldValidator().validate(schema, {"cover": "/uploads/cover.jpg"})
        FieldValidator().validate(schema, {"cover": "https://cdn.example.com/c.jpg"})
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate(schema, {"cover": "cover.jpg"})


class TestUniqueness:
    """Tests for delegated uniqueness checks."""

    def test_duplicate_value(self):
        checker = FakeUniqueness([("entry-1", "email", "a@b.com")])
        schema = make_schema(field("email", "email", unique=True))
        with pytest.raises(DuplicateValueError) as exc_info:
            FieldValidator(checker).validate(schema, {"email": "a@b.com"})
        assert exc_info.value.code == "DUPLICATE_VALUE"
        assert exc_info.value.status_code == 409

    def test_non_unique_fields_are_not_checked(self):
        checker = FakeUniqueness()
        schema = make_schema(field("email", "email"))
        FieldValidator(checker).validate(schema, {"email": "a@b.com"})
        assert checker.calls == []

    def test_partial_update_excludes_own_entry(self):
        checker = FakeUniqueness([("entry-1", "email", "a@b.com")])
        schema = make_schema(field("email", "email", unique=True))
        FieldValidator(checker).validate_partial(schema, {"email": "a@b.com"}, "entry-1")
        assert checker.calls[0]["exclude_id"] == "entry-1"
        with pytest.raises(DuplicateValueError):
            FieldValidator(checker).validate_partial(schema, {"email": "a@b.com"}, "entry-2")


class TestPartialValidation:
    """Tests for validate_partial."""

    def test_omitted_required_field_is_fine(self):
        schema = make_schema(
            field("title", "string", required=True),
            field("body", "text"),
        )
        assert FieldValidator().validate_partial(schema, {"body": "x"}) == {"body": "x"}

    def test_present_but_empty_required_field_fails(self):
        schema = make_schema(field("title", "string", required=True))
        with pytest.raises(MissingRequiredError):
            FieldValidator().validate_partial(schema, {"title": ""})

    def test_unknown_field_fails(self):
        schema = make_schema(field("title", "string"))
        with pytest.raises(UnknownFieldError) as exc_info:
            FieldValidator().validate_partial(schema, {"nope": 1})
        assert exc_info.value.field == "nope"

    def test_type_checks_still_apply(self):
        schema = make_schema(field("rating", "number", max_value=5))
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate_partial(schema, {"rating": 6})

    def test_field_named_like_a_media_reference_is_checked(self):
        schema = make_schema(field("legacy_media_id", "string", max_length=3))
        assert FieldValidator().validate_partial(schema, {"legacy_media_id": "abc"}) == {
            "legacy_media_id": "abc"
        }
        with pytest.raises(ConstraintViolationError):
            FieldValidator().validate_partial(schema, {"legacy_media_id": "abcd"})

    def test_unresolved_media_reference_is_unknown(self):
        schema = make_schema(field("cover", "media"))
        with pytest.raises(UnknownFieldError):
            FieldValidator().validate_partial(schema, {"cover_media_id": "m-1"})

    def test_defaults_not_injected(self):
        schema = make_schema(
            field("title", "string"),
            field("featured", "boolean", default_value="true"),
        )
        assert FieldValidator().validate_partial(schema, {"title": "x"}) == {"title": "x"}


class TestCoerceDefault:
    def test_unparseable_number_default_kept_as_string(self):
        assert coerce_default(field("n", "number", default_value="abc")) == "abc"

    def test_boolean_words(self):
        assert coerce_default(field("b", "boolean", default_value="No")) is False
        assert coerce_default(field("b", "boolean", default_value="1")) is True
