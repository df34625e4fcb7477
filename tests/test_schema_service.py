"""Tests for content type and field administration."""

import pytest

from headless_cms.content.entries import EntryService
from headless_cms.errors import ConflictError, ConstraintViolationError, NotFoundError
from headless_cms.schema.service import ContentTypeService
from headless_cms.schemas.content import (
    ContentTypeCreate,
    ContentTypeUpdate,
    FieldCreate,
    FieldUpdate,
)


class TestContentTypes:
    """Tests for content type CRUD."""

    def test_create_with_fields(self, article_type):
        data = article_type.to_dict()
        assert data["slug"] == "article"
        assert [f["name"] for f in data["fields"]] == [
            "title",
            "slug",
            "body",
            "rating",
            "featured",
            "cover",
        ]
        assert [f["name"] for f in data["seo_fields"]] == ["meta_title", "meta_description"]
        assert data["enable_seo"] is True

    def test_schema_snapshot(self, article_type):
        schema = article_type.to_schema()
        assert schema.field("meta_title").is_seo
        assert schema.field("missing") is None
        assert [f.name for f in schema.seo_fields] == ["meta_title", "meta_description"]
        assert len(schema.regular_fields) == 6

    def test_duplicate_slug_conflicts(self, article_type, seeded):
        with pytest.raises(ConflictError):
            ContentTypeService(seeded).create(ContentTypeCreate(name="Other", slug="article"))

    @pytest.mark.parametrize("slug", ["Has Caps", "under_score", "-lead", "news\n"])
    def test_invalid_slug(self, seeded, slug):
        with pytest.raises(ConstraintViolationError):
            ContentTypeService(seeded).create(ContentTypeCreate(name="X", slug=slug))

    def test_get_by_slug_and_list(self, article_type, seeded):
        service = ContentTypeService(seeded)
        assert service.get_by_slug("article").id == article_type.id
        assert [ct.slug for ct in service.list()] == ["article"]

    def test_get_missing(self, seeded):
        with pytest.raises(NotFoundError):
            ContentTypeService(seeded).get("nope")

    def test_update(self, article_type, seeded):
        updated = ContentTypeService(seeded).update(
            article_type.id, ContentTypeUpdate(name="Post", slug="post")
        )
        assert updated.name == "Post"
        assert updated.slug == "post"

    def test_update_rejects_slug_with_trailing_newline(self, article_type, seeded):
        with pytest.raises(ConstraintViolationError):
            ContentTypeService(seeded).update(article_type.id, ContentTypeUpdate(slug="post\n"))

    def test_delete_refused_while_entries_exist(self, article_type, seeded, callers):
        entry = EntryService(seeded).create_entry(callers["admin"], article_type.id, {"title": "Hello"})
        service = ContentTypeService(seeded)
        with pytest.raises(ConflictError):
            service.delete(article_type.id)

        EntryService(seeded).delete_entry(callers["admin"], entry.id)
        service.delete(article_type.id)
        with pytest.raises(NotFoundError):
            service.get(article_type.id)

    def test_deleted_slug_stays_reserved(self, article_type, seeded):
        service = ContentTypeService(seeded)
        service.delete(article_type.id)
        with pytest.raises(ConflictError):
            service.create(ContentTypeCreate(name="Again", slug="article"))


class TestFields:
    """Tests for field definitions."""

    def test_add_field(self, article_type, seeded):
        field = ContentTypeService(seeded).add_field(
            article_type.id, FieldCreate(name="author_email", type="email", unique=True)
        )
        assert field.to_dict()["unique"] is True
        assert field.position == 8

    def test_duplicate_field_name(self, article_type, seeded):
        with pytest.raises(ConflictError):
            ContentTypeService(seeded).add_field(
                article_type.id, FieldCreate(name="title", type="string")
            )

    def test_seo_field_enables_seo(self, seeded):
        service = ContentTypeService(seeded)
        ct = service.create(ContentTypeCreate(name="Page", slug="page"))
        assert ct.enable_seo is False
        service.add_field(ct.id, FieldCreate(name="seo_keywords", type="string", is_seo=True))
        assert service.get(ct.id).enable_seo is True

    def test_inconsistent_constraints_rejected(self, article_type, seeded):
        with pytest.raises(ConstraintViolationError):
            ContentTypeService(seeded).add_field(
                article_type.id,
                FieldCreate(name="summary", type="string", min_length=10, max_length=2),
            )

    def test_invalid_pattern_rejected(self, article_type, seeded):
        with pytest.raises(ConstraintViolationError):
            ContentTypeService(seeded).add_field(
                article_type.id, FieldCreate(name="code", type="string", pattern="[unclosed")
            )

    def test_default_must_fit_the_type(self, article_type, seeded):
        with pytest.raises(ConstraintViolationError):
            ContentTypeService(seeded).add_field(
                article_type.id,
                FieldCreate(name="score", type="number", max_value=5, default_value="9"),
            )

    def test_update_field(self, article_type, seeded):
        service = ContentTypeService(seeded)
        body = next(f for f in article_type.fields if f.name == "body")
        updated = service.update_field(body.id, FieldUpdate(required=True, max_length=500))
        assert updated.required is True
        assert updated.max_length == 500

    def test_rename_to_existing_name_conflicts(self, article_type, seeded):
        body = next(f for f in article_type.fields if f.name == "body")
        with pytest.raises(ConflictError):
            ContentTypeService(seeded).update_field(body.id, FieldUpdate(name="title"))

    def test_delete_field(self, article_type, seeded):
        service = ContentTypeService(seeded)
        body = next(f for f in article_type.fields if f.name == "body")
        service.delete_field(body.id)
        assert service.load_schema(article_type.id).field("body") is None

    def test_validation_rules(self, article_type, seeded):
        title = next(f for f in article_type.fields if f.name == "title")
        rules = ContentTypeService(seeded).field_validation_rules(title.id)
        assert rules == {
            "name": "title",
            "type": "string",
            "required": True,
            "unique": False,
            "min_length": 3,
            "max_length": 100,
        }
