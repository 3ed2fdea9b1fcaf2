from structmapper.mapping import MemberDescriptor, plan, plan_pairs, resolve
from tests.utils import make_index, make_type


def test_same_name_members_are_copied_in_source_order():
    source = make_type("Point3", members=["z", "x", "y"])
    target = make_type("Point2", members=["x", "y"])

    result = plan(source, target)

    assert result.as_pairs() == [("x", "x"), ("y", "y")]
    assert result.unmatched == ("z",)
    assert result.source == "Point3"
    assert result.target == "Point2"


def test_ignored_member_never_appears():
    source = make_type("Account", members=[
        "id",
        MemberDescriptor("password", ignore=True),
        MemberDescriptor("token", rename="secret", ignore=True),
    ])
    target = make_type("AccountDto", members=["id", "password", "secret"])

    result = plan(source, target)

    assert result.as_pairs() == [("id", "id")]
    assert result.ignored == ("password", "token")
    assert result.unmatched == ()


def test_rename_is_used_when_no_same_name_member():
    source = make_type("Employee", members=[MemberDescriptor("surname", rename="last_name")])
    target = make_type("EmployeeDto", members=["last_name"])

    assert plan(source, target).as_pairs() == [("surname", "last_name")]


def test_same_name_match_wins_over_rename():
    source = make_type("S", members=[MemberDescriptor("X", rename="Y")])
    target = make_type("T", members=["Y", "X"])

    assert plan(source, target).as_pairs() == [("X", "X")]


def test_unresolvable_rename_is_dropped_and_planning_continues():
    source = make_type("S", members=[
        MemberDescriptor("a", rename="missing"),
        "b",
        "orphan",
        "c",
    ])
    target = make_type("T", members=["c", "b"])

    result = plan(source, target)

    assert result.as_pairs() == [("b", "b"), ("c", "c")]
    assert result.unmatched == ("a", "orphan")


def test_target_side_rename_points_back_to_source_member():
    person = make_type("Person", members=["Name", "Age"])
    person_dto = make_type("PersonDto", members=["Name", MemberDescriptor("Years", rename="Age")])

    assert plan(person, person_dto).as_pairs() == [("Name", "Name"), ("Age", "Years")]
    assert plan(person, person_dto, match_target_renames=False).as_pairs() == [("Name", "Name")]


def test_source_rename_is_tried_before_target_rename():
    source = make_type("S", members=[MemberDescriptor("a", rename="b")])
    target = make_type("T", members=[MemberDescriptor("c", rename="a"), "b"])

    assert plan(source, target).as_pairs() == [("a", "b")]


def test_first_target_member_with_the_name_is_used():
    source = make_type("S", members=["v"])
    target = make_type("T", members=[MemberDescriptor("v", rename="w"), MemberDescriptor("v")])

    result = plan(source, target)

    assert result.as_pairs() == [("v", "v")]
    assert target.find_member("v") is target.members[0]


def test_member_without_counterpart_produces_empty_plan():
    result = plan(make_type("S", members=["a"]), make_type("T", members=["b"]))

    assert len(result) == 0
    assert list(result) == []


def test_plan_is_deterministic():
    source = make_type("S", members=["a", MemberDescriptor("b", rename="c"), "d"])
    target = make_type("T", members=["d", "c", "a"])

    assert plan(source, target) == plan(source, target)


def test_person_scenario_end_to_end():
    person = make_type("Person", members=["Name", "Age"], map_to=["PersonDto"])
    person_dto = make_type("PersonDto", members=["Name", MemberDescriptor("Years", rename="Age")])
    index = make_index(person, person_dto)

    pairs = resolve([person])
    records = plan_pairs(index, pairs)

    assert [p.key for p in pairs] == ["Person->PersonDto"]
    assert not pairs[0].bidirectional
    assert records[0].forward.as_pairs() == [("Name", "Name"), ("Age", "Years")]
    assert records[0].reverse is None


def test_bidirectional_pair_gets_two_independent_plans():
    a = make_type("A", members=["id", MemberDescriptor("label", rename="title"), "extra"], map_to=["B"])
    b = make_type("B", members=["id", "title", MemberDescriptor("cache", ignore=True)], map_to=["A"])
    index = make_index(a, b)

    records = plan_pairs(index, resolve([a, b]))

    assert len(records) == 1
    record = records[0]
    assert record.pair.bidirectional
    assert record.forward.as_pairs() == [("id", "id"), ("label", "title")]
    assert record.reverse.as_pairs() == [("id", "id"), ("title", "label")]
    assert record.reverse.ignored == ("cache",)
    assert record.to_dict() == {
        "key": "A->B",
        "source": "A",
        "target": "B",
        "bidirectional": True,
        "forward": [["id", "id"], ["label", "title"]],
        "reverse": [["id", "id"], ["title", "label"]],
    }


def test_ignored_target_member_is_not_a_rename_fallback():
    person = make_type("Person", members=["Name", "Age"])
    person_dto = make_type("PersonDto", members=[
        "Name",
        MemberDescriptor("Years", rename="Age", ignore=True),
    ])

    result = plan(person, person_dto)

    assert result.as_pairs() == [("Name", "Name")]
    assert result.unmatched == ("Age",)


def test_target_rename_does_not_steal_same_name_member():
    person = make_type("Person", members=["Years", "Age"])
    person_dto = make_type("PersonDto", members=[MemberDescriptor("Years", rename="Age")])

    result = plan(person, person_dto)

    assert result.as_pairs() == [("Years", "Years")]
    assert result.unmatched == ("Age",)


def test_target_rename_skips_member_bound_by_source_rename():
    source = make_type("S", members=[MemberDescriptor("a", rename="t"), "b"])
    target = make_type("T", members=[MemberDescriptor("t", rename="b")])

    result = plan(source, target)

    assert result.as_pairs() == [("a", "t")]
    assert result.unmatched == ("b",)
