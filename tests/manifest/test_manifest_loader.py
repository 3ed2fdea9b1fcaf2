import json
import os

import pytest

from structmapper.manifest import (ManifestError, is_manifest, load_manifest,
                                   structs_from_manifest)
from tests.utils import example_path


def test_is_manifest_by_suffix():
    assert is_manifest("types.json")
    assert is_manifest("types.TOML")
    assert not is_manifest("types.h")


def test_load_toml_manifest():
    structs = load_manifest(example_path("person", "person.toml"))

    person, dto = structs
    assert person.name == "Person"
    assert person.qualified_name == "Person"
    assert person.map_to == [["PersonDto"]]
    assert [f.name for f in person.fields] == ["Name", "Age", "Secret"]
    assert person.fields[2].ignore
    assert dto.fields[1].rename == "Age"
    expected_header = os.path.join(os.path.dirname(example_path("person", "person.toml")), "person.h")
    assert os.path.realpath(person.header) == os.path.realpath(expected_header)


def test_load_json_manifest_with_grouped_directives(tmp_path):
    manifest = {
        "types": [
            {
                "name": "Report",
                "qualified_name": "billing::Report",
                "map_from": [["Invoice", "Order"], "Quote"],
                "members": [
                    "total",
                    {"name": "notes", "visibility": "private", "type": "char *"},
                ],
            },
        ]
    }
    path = tmp_path / "types.json"
    path.write_text(json.dumps(manifest))

    (report,) = load_manifest(str(path))

    assert report.qualified_name == "billing::Report"
    assert report.map_from == [["Invoice", "Order"], ["Quote"]]
    assert report.fields[1].access == "private"
    assert report.fields[1].type_spelling == "char *"
    assert report.header == ""


@pytest.mark.parametrize("data", [
    {},
    {"types": [{"members": ["a"]}]},
    {"types": [{"name": "A", "map_to": [[]]}]},
    {"types": [{"name": "A", "members": [{"name": "x", "ignore": "yes"}]}]},
    {"types": [{"name": "A", "colour": "red"}]},
    [],
])
def test_invalid_manifest_is_rejected(data):
    with pytest.raises(ManifestError, match="^schema:"):
        structs_from_manifest(data)


def test_unparsable_manifest(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[[types]\nname =")

    with pytest.raises(ManifestError):
        load_manifest(str(path))


def test_missing_manifest():
    with pytest.raises(FileNotFoundError):
        load_manifest(example_path("person", "nope.json"))
