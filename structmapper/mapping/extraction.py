from typing import Iterable, Optional

from structmapper import logging as structmapper_logging
from structmapper.c_parser.struct_info import StructInfo

from .mapping_types import MemberDescriptor, TypeDescriptor, TypeIndex

logger = structmapper_logging.get_logger(__name__)


class _NameResolver:
    """Resolves type names written in directives to declaration identities."""

    def __init__(self, declarations: Iterable[StructInfo]):
        self._identities: set[str] = set()
        self._by_short_name: dict[str, list[str]] = {}
        for declaration in declarations:
            self._identities.add(declaration.qualified_name)
            self._by_short_name.setdefault(declaration.name, []).append(declaration.qualified_name)

    def resolve(self, written: str) -> Optional[str]:
        written = written.strip()
        if written.startswith("struct "):
            written = written[len("struct "):].strip()
        if written.startswith("::"):
            written = written[2:]
        if written in self._identities:
            return written
        candidates = self._by_short_name.get(written, [])
        if not candidates and "::" in written:
            # partially qualified, e.g. `dto::UserDto` written inside namespace `app`
            candidates = [i for i in self._identities if i.endswith(f"::{written}")]
        if len(candidates) == 1:
            return candidates[0]
        return None


def _unique_declarations(declarations: Iterable[StructInfo]) -> list[StructInfo]:
    seen: set[str] = set()
    unique = []
    for declaration in declarations:
        if declaration.qualified_name in seen:
            logger.debug("Skipping repeated declaration of %s at %s",
                         declaration.qualified_name, declaration.location)
            continue
        seen.add(declaration.qualified_name)
        unique.append(declaration)
    return unique


def _resolve_directives(owner: StructInfo, directives: list[list[str]], resolver: _NameResolver) -> tuple[tuple[str, ...], ...]:
    resolved = []
    for written_names in directives:
        identities = []
        for written in written_names:
            identity = resolver.resolve(written)
            if identity is None:
                logger.debug("%s: cannot resolve type reference '%s'; skipped",
                             owner.qualified_name, written)
                continue
            identities.append(identity)
        resolved.append(tuple(identities))
    return tuple(resolved)


def _to_descriptor(declaration: StructInfo, resolver: _NameResolver) -> TypeDescriptor:
    members = tuple(
        MemberDescriptor(name=f.name, rename=f.rename, ignore=f.ignore)
        for f in declaration.fields
        if f.is_public
    )
    return TypeDescriptor(
        identity=declaration.qualified_name,
        name=declaration.name,
        members=members,
        map_from=_resolve_directives(declaration, declaration.map_from, resolver),
        map_to=_resolve_directives(declaration, declaration.map_to, resolver),
        spelling=declaration.spelling,
        header=declaration.header,
    )


def extract(declarations: Iterable[StructInfo]) -> TypeIndex:
    """Build the read-only type index from scanned declarations.

    Every declaration is indexed; only those with map-from or map-to
    directives end up in `TypeIndex.annotated`.
    """
    unique = _unique_declarations(declarations)
    resolver = _NameResolver(unique)
    descriptors: dict[str, TypeDescriptor] = {}
    annotated = []
    for declaration in unique:
        descriptor = _to_descriptor(declaration, resolver)
        descriptors[descriptor.identity] = descriptor
        if declaration.has_mapping_directives:
            annotated.append(descriptor)
    logger.debug("Extracted %d types, %d with mapping directives", len(descriptors), len(annotated))
    return TypeIndex(descriptors, tuple(annotated))
