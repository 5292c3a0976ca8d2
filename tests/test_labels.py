import pytest

from badgeforge.engine.labels import (
    Sentinel,
    default_label_for,
    label_for,
    rename_label,
    resolve,
    resolve_card,
)
from badgeforge.engine.layout import ElementNotFound
from badgeforge.engine.records import Record


def test_resolves_value_by_default_label(conference_layout, ada):
    assert resolve("name", conference_layout, {}, ada) == "Ada"


def test_custom_label_matches_case_insensitively(conference_layout, ada):
    labels = {"company": "school name"}
    assert resolve("company", conference_layout, labels, ada) == "Hill High"


def test_exact_match_preferred_over_case_insensitive(conference_layout):
    record = Record(extras={"org": "lower", "Org": "exact"})
    assert resolve("company", conference_layout, {"company": "Org"}, record) == "exact"


def test_blanked_extra_shows_label_placeholder(conference_layout):
    record = Record(extras={"Company": ""})
    assert resolve("company", conference_layout, {}, record) == "Company"

    record = Record(extras={"Company": "", "company": "ACME"})
    assert resolve("company", conference_layout, {}, record) == "ACME"


def test_unmatched_label_is_returned_as_placeholder(conference_layout, ada):
    labels = {"role": "Dietary Needs"}
    assert resolve("role", conference_layout, labels, ada) == "Dietary Needs"
    assert resolve("registrationId", conference_layout, {}, ada) == "ID"


def test_no_record_resolves_to_label(conference_layout):
    assert resolve("name", conference_layout, {}, None) == "Name"


def test_picture_elements_resolve_to_sentinels(conference_layout, ada):
    assert resolve("image", conference_layout, {}, ada) is Sentinel.PHOTO
    assert resolve("qrCode", conference_layout, {}, ada) is Sentinel.QR_CODE

    key = conference_layout.add_element("photo")
    assert resolve(key, conference_layout, {}, ada) is Sentinel.PHOTO


def test_removed_element_does_not_resolve(conference_layout, ada):
    conference_layout.remove_element("company")
    with pytest.raises(ElementNotFound):
        resolve("company", conference_layout, {}, ada)


def test_resolution_is_pure(conference_layout, ada):
    labels = {"company": "school name"}
    record_before = ada.model_dump()
    labels_before = dict(labels)

    first = resolve("company", conference_layout, labels, ada)
    second = resolve("company", conference_layout, labels, ada)

    assert first == second
    assert ada.model_dump() == record_before
    assert labels == labels_before


def test_custom_element_labels():
    assert default_label_for("customText3") == "Text 3"
    assert default_label_for("customPhoto2") == "Image 2"
    assert default_label_for("somethingElse") == "somethingElse"


def test_blank_custom_label_falls_back_to_default():
    assert label_for("name", {"name": "   "}) == "Name"


def test_rename_label_returns_new_map():
    labels = {"role": "Title"}
    renamed = rename_label(labels, "name", "Full Name")

    assert renamed == {"role": "Title", "name": "Full Name"}
    assert labels == {"role": "Title"}


def test_rename_to_blank_or_default_drops_override():
    labels = {"name": "Full Name", "role": "Title"}
    assert rename_label(labels, "name", "") == {"role": "Title"}
    assert rename_label(labels, "role", "Role") == {"name": "Full Name"}


def test_resolve_card_skips_hidden_elements(conference_layout, ada):
    conference_layout.set_visible("role", False)
    resolved = {element.key: element for element in resolve_card(conference_layout, {}, ada)}

    assert "role" not in resolved
    assert resolved["name"].value == "Ada"
    assert resolved["image"].value == "PHOTO"
    assert resolved["name"].position.font_size == 22
