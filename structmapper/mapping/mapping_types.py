from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Collection, Iterator, Mapping, Optional


@dataclass(frozen=True)
class MemberDescriptor:
    name: str
    rename: Optional[str] = None
    ignore: bool = False


@dataclass(frozen=True)
class TypeDescriptor:
    """Read-only view of one declaration after its directives are resolved.

    `map_from`/`map_to` keep one tuple per directive; each tuple holds the
    identities of the referenced types that could be resolved.
    """

    identity: str
    name: str
    members: tuple[MemberDescriptor, ...] = ()
    map_from: tuple[tuple[str, ...], ...] = ()
    map_to: tuple[tuple[str, ...], ...] = ()
    spelling: str = ""
    header: str = ""
    member_index: Mapping[str, MemberDescriptor] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, MemberDescriptor] = {}
        for member in self.members:
            index.setdefault(member.name, member)
        object.__setattr__(self, "member_index", MappingProxyType(index))
        if not self.spelling:
            object.__setattr__(self, "spelling", self.identity)

    def find_member(self, name: str) -> Optional[MemberDescriptor]:
        return self.member_index.get(name)

    def find_member_renamed_to(self, name: str, exclude: Collection[str] = ()) -> Optional[MemberDescriptor]:
        """First non-ignored member whose rename is `name`, skipping names in `exclude`."""
        for member in self.members:
            if member.rename == name and not member.ignore and member.name not in exclude:
                return member
        return None


class TypeIndex(Mapping[str, TypeDescriptor]):
    """identity -> TypeDescriptor for every scanned declaration.

    `annotated` lists, in input order, the descriptors carrying at least one
    map-from or map-to directive.
    """

    def __init__(self, descriptors: Mapping[str, TypeDescriptor], annotated: tuple[TypeDescriptor, ...]):
        self._descriptors = MappingProxyType(dict(descriptors))
        self.annotated = annotated

    def __getitem__(self, identity: str) -> TypeDescriptor:
        return self._descriptors[identity]

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __repr__(self):
        return f"TypeIndex({len(self)} types, {len(self.annotated)} annotated)"


def pair_key(source: str, target: str) -> str:
    return f"{source}->{target}"


@dataclass
class ConversionPair:
    key: str
    source: str
    target: str
    bidirectional: bool = False

    @property
    def is_self_pair(self) -> bool:
        return self.source == self.target


@dataclass(frozen=True)
class Assignment:
    source_member: str
    target_member: str


@dataclass(frozen=True)
class AssignmentPlan:
    source: str
    target: str
    assignments: tuple[Assignment, ...] = ()
    # informational, for host diagnostics
    ignored: tuple[str, ...] = ()
    unmatched: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[Assignment]:
        return iter(self.assignments)

    def __len__(self) -> int:
        return len(self.assignments)

    def as_pairs(self) -> list[tuple[str, str]]:
        return [(a.source_member, a.target_member) for a in self.assignments]


@dataclass(frozen=True)
class MappingRecord:
    """One resolved pair with its plans, ready for emission."""

    pair: ConversionPair
    forward: AssignmentPlan
    reverse: Optional[AssignmentPlan] = None

    def to_dict(self) -> dict:
        data = {
            "key": self.pair.key,
            "source": self.pair.source,
            "target": self.pair.target,
            "bidirectional": self.pair.bidirectional,
            "forward": [list(p) for p in self.forward.as_pairs()],
        }
        if self.reverse is not None:
            data["reverse"] = [list(p) for p in self.reverse.as_pairs()]
        return data
