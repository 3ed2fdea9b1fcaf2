from structmapper.c_parser.struct_info import FieldInfo, StructInfo
from structmapper.mapping import TypeDescriptor, extract


def _person_structs():
    return [
        StructInfo(
            "Person",
            spelling="struct Person",
            header="/src/person.h",
            fields=[FieldInfo("Name"), FieldInfo("Age"), FieldInfo("Secret", ignore=True)],
            map_to=[["PersonDto"]],
        ),
        StructInfo(
            "PersonDto",
            fields=[FieldInfo("Name"), FieldInfo("Years", rename="Age")],
        ),
    ]


def test_every_declaration_is_indexed_but_only_annotated_are_listed():
    index = extract(_person_structs())

    assert set(index) == {"Person", "PersonDto"}
    assert len(index) == 2
    assert [d.identity for d in index.annotated] == ["Person"]


def test_descriptor_carries_members_and_directives():
    person = extract(_person_structs())["Person"]

    assert isinstance(person, TypeDescriptor)
    assert [m.name for m in person.members] == ["Name", "Age", "Secret"]
    assert person.find_member("Secret").ignore
    assert person.map_to == (("PersonDto",),)
    assert person.map_from == ()
    assert person.spelling == "struct Person"
    assert person.header == "/src/person.h"


def test_rename_is_kept_on_member():
    dto = extract(_person_structs())["PersonDto"]

    assert dto.find_member("Years").rename == "Age"
    assert dto.spelling == "PersonDto"


def test_unresolvable_references_are_skipped():
    structs = [
        StructInfo("Order", map_from=[["Missing", "OrderRow"]], map_to=[["Nowhere"]]),
        StructInfo("OrderRow"),
    ]

    order = extract(structs)["Order"]

    assert order.map_from == (("OrderRow",),)
    assert order.map_to == ((),)
    assert [d.identity for d in extract(structs).annotated] == ["Order"]


def test_references_resolve_by_identity_then_unique_short_name():
    structs = [
        StructInfo("User", qualified_name="app::User", map_to=[["UserDto", "api::Token", "struct Audit"]]),
        StructInfo("UserDto", qualified_name="app::dto::UserDto"),
        StructInfo("Token", qualified_name="api::Token"),
        StructInfo("Token", qualified_name="auth::Token"),
        StructInfo("Audit"),
    ]

    user = extract(structs)["app::User"]

    assert user.map_to == (("app::dto::UserDto", "api::Token", "Audit"),)


def test_ambiguous_short_name_is_skipped():
    structs = [
        StructInfo("Report", map_from=[["Token"]]),
        StructInfo("Token", qualified_name="api::Token"),
        StructInfo("Token", qualified_name="auth::Token"),
    ]

    assert extract(structs)["Report"].map_from == ((),)


def test_non_public_fields_are_not_members():
    structs = [
        StructInfo("Widget", fields=[
            FieldInfo("id"),
            FieldInfo("cache", access="private"),
            FieldInfo("parent", access="protected"),
        ]),
    ]

    widget = extract(structs)["Widget"]

    assert [m.name for m in widget.members] == ["id"]


def test_first_declaration_of_an_identity_wins():
    structs = [
        StructInfo("Point", location="a.h:1", fields=[FieldInfo("x")], map_to=[["Vec"]]),
        StructInfo("Point", location="b.h:9", fields=[FieldInfo("y")]),
        StructInfo("Vec"),
    ]

    index = extract(structs)

    assert [m.name for m in index["Point"].members] == ["x"]
    assert len(index.annotated) == 1


def test_declarations_without_directives_or_members_do_not_fail():
    index = extract([StructInfo("Empty"), StructInfo("AlsoEmpty", fields=[])])

    assert index.annotated == ()
    assert index["Empty"].members == ()


def test_partially_qualified_reference_resolves_by_suffix():
    structs = [
        StructInfo("Account", qualified_name="app::Account", map_to=[["dto::AccountDto"]]),
        StructInfo("AccountDto", qualified_name="app::dto::AccountDto"),
    ]

    assert extract(structs)["app::Account"].map_to == (("app::dto::AccountDto",),)
