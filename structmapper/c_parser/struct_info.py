from typing import Optional

from structmapper.data_types import DirectiveKind

from .annotations import Directive

PUBLIC = "public"


class FieldInfo:
    def __init__(self, name, access=PUBLIC, ignore=False, rename=None, type_spelling=""):
        self.name: str = name
        self.access: str = access
        self.ignore: bool = ignore
        self.rename: Optional[str] = rename
        self.type_spelling: str = type_spelling

    @property
    def is_public(self) -> bool:
        return self.access == PUBLIC

    def apply_directive(self, directive: Directive) -> bool:
        """Record a field directive. Returns False if it does not apply to fields."""
        if directive.kind == DirectiveKind.IGNORE:
            self.ignore = True
            return True
        if directive.kind == DirectiveKind.NAME:
            # the first rename wins
            if self.rename is None:
                self.rename = directive.arguments[0]
            return True
        return False

    def __repr__(self):
        return f"FieldInfo({self.name})"


class StructInfo:
    """A struct declaration as seen by the scanner, with raw directive data.

    `map_from` and `map_to` hold one entry per directive, each entry being the
    type names exactly as written in the directive.
    """

    def __init__(
        self,
        name,
        qualified_name=None,
        spelling=None,
        location="",
        header="",
        fields=None,
        map_from=None,
        map_to=None,
    ):
        self.name: str = name
        self.qualified_name: str = qualified_name or name
        self.spelling: str = spelling or self.qualified_name
        self.location: str = location
        self.header: str = header
        self.fields: list[FieldInfo] = fields if fields is not None else []
        self.map_from: list[list[str]] = map_from if map_from is not None else []
        self.map_to: list[list[str]] = map_to if map_to is not None else []

    @property
    def has_mapping_directives(self) -> bool:
        return bool(self.map_from or self.map_to)

    def apply_directive(self, directive: Directive) -> bool:
        """Record a struct directive. Returns False if it does not apply to structs."""
        if directive.kind == DirectiveKind.MAP_FROM:
            self.map_from.append(list(directive.arguments))
            return True
        if directive.kind == DirectiveKind.MAP_TO:
            self.map_to.append(list(directive.arguments))
            return True
        return False

    def __repr__(self):
        return f"StructInfo({self.qualified_name})"
