from __future__ import annotations

import pytest

from landing.content import paths
from landing.content.errors import ContentPathError, ContentValueError, IndexOutOfRangeError


def test_parse_path_tags_segments():
    resolved = paths.parse_path("testimonials.items.1.rating")
    assert resolved.segments == (
        paths.Key("testimonials"),
        paths.Key("items"),
        paths.Index(1),
        paths.Key("rating"),
    )


def test_plan_keys_are_fields():
    resolved = paths.parse_path("pricing.plans.start.price")
    assert resolved.segments[2] == paths.Key("start")


@pytest.mark.parametrize(
    "path",
    [
        "",
        "hero.headline",
        "pricing.plans.enterprise.price",
        "modules.items.first.title",
        "modules.items.-1.title",
        "hero.title.extra",
        "hero..title",
        "footer.copyright.0",
    ],
)
def test_paths_outside_schema_are_rejected(path):
    with pytest.raises(ContentPathError):
        paths.parse_path(path)


def test_valid_paths_enumerates_closed_set():
    valid = paths.valid_paths()
    assert "pricing.plans.light.features.*" in valid
    assert "testimonials.items.*.rating" in valid
    assert "contact.company" in valid
    assert not any("enterprise" in path for path in valid)
    assert len(valid) == len(set(valid))


def test_set_value_replaces_leaf(make_document):
    document = make_document()
    paths.set_value(document, "pricing.plans.start.price", "$99")
    assert document["pricing"]["plans"]["start"]["price"] == "$99"
    assert document["pricing"]["plans"]["light"] == make_document()["pricing"]["plans"]["light"]


def test_set_value_checks_live_index(make_document):
    document = make_document()
    before = make_document()
    with pytest.raises(IndexOutOfRangeError) as excinfo:
        paths.set_value(document, "testimonials.items.5.rating", 5)
    assert excinfo.value.length == 3
    assert document == before


@pytest.mark.parametrize("value", ["5", 0, 6, 4.5, True])
def test_rating_must_be_integer_in_range(make_document, value):
    document = make_document()
    with pytest.raises(ContentValueError):
        paths.set_value(document, "testimonials.items.0.rating", value)
    assert document == make_document()


def test_leaf_string_rejects_other_types(make_document):
    with pytest.raises(ContentValueError):
        paths.set_value(make_document(), "hero.title", 42)


def test_whole_list_replacement_is_validated(make_document):
    document = make_document()
    paths.set_value(document, "pricing.plans.pro.features", ["A", "B"])
    assert document["pricing"]["plans"]["pro"]["features"] == ["A", "B"]

    with pytest.raises(ContentValueError):
        paths.set_value(document, "modules.items", [{"title": "no content"}])
    assert len(document["modules"]["items"]) == 5


def test_get_value(make_document):
    document = make_document()
    assert paths.get_value(document, "modules.items.0.title") == "Радар конкурентов"
    with pytest.raises(IndexOutOfRangeError):
        paths.get_value(document, "modules.items.9")


def test_insert_and_remove_items(make_document):
    document = make_document()
    position = paths.insert_item(document, "pricing.plans.light.features", "Telegram", 0)
    assert position == 0
    assert document["pricing"]["plans"]["light"]["features"][0] == "Telegram"

    removed = paths.remove_item(document, "pricing.plans.light.features", 0)
    assert removed == "Telegram"
    assert document == make_document()

    with pytest.raises(IndexOutOfRangeError):
        paths.insert_item(document, "modules.items", {"title": "x", "content": "y"}, 42)
    with pytest.raises(ContentPathError):
        paths.remove_item(document, "hero.title", 0)
