import json

import pytest

from user_errors.exceptions.base import CatalogError
from user_errors.translation import CatalogTranslator, Translator, replace_placeholders


def test_translates_known_key(translator):
    assert translator.trans("invoice.locked", {"%number%": "42"}) == "Invoice 42 is already booked."


def test_missing_key_is_its_own_template(translator):
    assert translator.trans("Nothing for %name%", {"%name%": "you"}) == "Nothing for you"


def test_unused_parameters_are_ignored(translator):
    assert translator.trans("generic.denied", {"%who%": "bob"}) == "Not allowed."


def test_is_a_translator(translator):
    assert isinstance(translator, Translator)


def test_longest_placeholder_wins():
    assert replace_placeholders("%ab% %a%", {"%a%": "1", "%ab%": "2"}) == "2 1"


def test_replaced_text_is_not_substituted_again():
    assert replace_placeholders("%a%", {"%a%": "%b%", "%b%": "B"}) == "%b%"


def test_no_parameters_returns_template():
    assert replace_placeholders("as is %x%", {}) == "as is %x%"


def test_from_file_flattens_nested_objects(tmp_path):
    path = tmp_path / "messages.json"
    path.write_text(
        json.dumps({"order": {"out_of_stock": "Only %available% left.", "closed": "Closed."}, "top": "Top"}),
        encoding="utf-8",
    )

    translator = CatalogTranslator.from_file(path)

    assert translator.messages == {
        "order.out_of_stock": "Only %available% left.",
        "order.closed": "Closed.",
        "top": "Top",
    }


def test_from_file_missing(tmp_path):
    with pytest.raises(CatalogError):
        CatalogTranslator.from_file(tmp_path / "absent.json")


def test_from_file_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError):
        CatalogTranslator.from_file(path)


def test_from_file_requires_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(CatalogError):
        CatalogTranslator.from_file(path)
