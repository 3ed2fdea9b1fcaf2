import os

from clang import cindex
from clang.cindex import AccessSpecifier, CursorKind

from structmapper import logging as structmapper_logging, utils
from structmapper.data_types import SourceLanguage

from .annotations import parse_annotation
from .struct_info import FieldInfo, StructInfo

logger = structmapper_logging.get_logger(__name__)

_RECORD_KINDS = (CursorKind.STRUCT_DECL, CursorKind.CLASS_DECL)
_SCOPE_KINDS = (
    CursorKind.NAMESPACE,
    CursorKind.STRUCT_DECL,
    CursorKind.CLASS_DECL,
    CursorKind.UNION_DECL,
)
_ACCESS_NAMES = {
    AccessSpecifier.PRIVATE: "private",
    AccessSpecifier.PROTECTED: "protected",
}
_DEFAULT_STD = {
    SourceLanguage.C: "c99",
    SourceLanguage.CXX: "c++17",
}


class CParser:
    def __init__(
        self,
        filename,
        extra_args=None,
        language="c",
        std=None,
        include_system_paths=True,
        omit_error=False,
    ):
        if not os.path.isfile(filename):
            raise FileNotFoundError(f"Could not find file {filename}")
        self.filename = filename
        self.language = SourceLanguage(language)

        index = cindex.Index.create()
        std = std or _DEFAULT_STD[self.language]
        args = ['-x', self.language.value, f'-std={std}', f'-I{utils.resources_dir()}']
        args.extend(extra_args or [])
        self.compiler_include_paths = self._discover_include_paths() if include_system_paths else []
        args.extend([f"-I{path}" for path in self.compiler_include_paths])
        self.translation_unit = index.parse(self.filename, args=args)
        # check diagnostics
        if not omit_error:
            for diag in self.translation_unit.diagnostics:
                if diag.severity >= cindex.Diagnostic.Error:
                    logger.warning("Parsing error in %s: %s", filename, diag.spelling)

        self._typedef_names: dict[str, str] = {}
        self._structs: dict[str, StructInfo] = {}
        self._collect_typedef_names(self.translation_unit.cursor)
        self._collect_structs(self.translation_unit.cursor)
        logger.debug("Found %d struct definitions in %s", len(self._structs), filename)

    def _discover_include_paths(self) -> list[str]:
        try:
            return utils.get_compiler_include_paths(self.language.value)
        except OSError as exc:
            logger.warning("Cannot query system include paths (%s); system headers may not resolve", exc)
            return []

    def get_struct_info(self, struct_name) -> StructInfo:
        """
        Raises ValueError if the struct is not found.
        """
        if struct_name in self._structs:
            return self._structs[struct_name]
        for struct in self._structs.values():
            if struct.name == struct_name:
                return struct
        raise ValueError(f"Struct {struct_name} not found")

    def get_structs(self) -> list[StructInfo]:
        return list(self._structs.values())

    @staticmethod
    def _cursor_key(node) -> str:
        usr = node.get_usr()
        if usr:
            return usr
        location = node.location
        file_name = location.file.name if location.file else ""
        return f"{file_name}:{location.line}:{location.column}"

    @staticmethod
    def _is_unnamed(name: str) -> bool:
        return not name or "(unnamed" in name or "(anonymous" in name

    def _collect_typedef_names(self, node):
        """Remember the first typedef naming each record, e.g. `typedef struct {...} Point;`."""
        if node.kind == CursorKind.TYPEDEF_DECL and not self._is_in_system_header(node):
            declaration = node.underlying_typedef_type.get_canonical().get_declaration()
            if declaration.kind in _RECORD_KINDS:
                self._typedef_names.setdefault(self._cursor_key(declaration), node.spelling)
        for child in node.get_children():
            self._collect_typedef_names(child)

    def _collect_structs(self, node):
        if node.kind in _RECORD_KINDS and node.is_definition():
            # Exclude structs declared in system headers
            if node.location and not self._is_in_system_header(node):
                struct_info = self._build_struct_info(node)
                if struct_info is not None and struct_info.qualified_name not in self._structs:
                    self._structs[struct_info.qualified_name] = struct_info
        for child in node.get_children():
            self._collect_structs(child)

    def _build_struct_info(self, node):
        typedef_name = self._typedef_names.get(self._cursor_key(node))
        name = node.spelling
        if self._is_unnamed(name):
            if typedef_name is None:
                return None
            name = typedef_name

        qualified_name = self._qualified_name(node, name)
        if self.language == SourceLanguage.CXX:
            spelling = qualified_name
        elif typedef_name is not None:
            spelling = typedef_name
        else:
            spelling = f"struct {name}"

        header = node.location.file.name if node.location.file else self.filename
        struct_info = StructInfo(
            name,
            qualified_name=qualified_name,
            spelling=spelling,
            location=f"{header}:{node.location.line}",
            header=header,
        )

        for child in node.get_children():
            if child.kind == CursorKind.ANNOTATE_ATTR:
                directive = parse_annotation(child.spelling)
                if directive is not None and not struct_info.apply_directive(directive):
                    logger.warning("%s: directive %s does not apply to structs",
                                   struct_info.location, directive.kind.name)
            elif child.kind == CursorKind.FIELD_DECL:
                struct_info.fields.append(self._build_field_info(child, struct_info))
        return struct_info

    def _build_field_info(self, node, owner: StructInfo) -> FieldInfo:
        field = FieldInfo(
            node.spelling,
            access=_ACCESS_NAMES.get(node.access_specifier, "public"),
            type_spelling=node.type.spelling,
        )
        for child in node.get_children():
            if child.kind != CursorKind.ANNOTATE_ATTR:
                continue
            directive = parse_annotation(child.spelling)
            if directive is not None and not field.apply_directive(directive):
                logger.warning("%s: directive %s does not apply to field %s",
                               owner.location, directive.kind.name, field.name)
        return field

    def _qualified_name(self, node, name: str) -> str:
        # C has a single tag namespace, nested declarations are still global
        if self.language == SourceLanguage.C:
            return name
        parts = [name]
        parent = node.semantic_parent
        while parent is not None and parent.kind in _SCOPE_KINDS:
            if parent.spelling and not self._is_unnamed(parent.spelling):
                parts.append(parent.spelling)
            parent = parent.semantic_parent
        return "::".join(reversed(parts))

    def _is_in_system_header(self, node):
        """
        Determines if the location is in a system header.
        """
        location = getattr(node, "location", None)
        if location is None or location.file is None:
            return True
        node_file_name = location.file.name
        for include_path in self.compiler_include_paths:
            if node_file_name.startswith(include_path):
                return True
        return bool(cindex.conf.lib.clang_Location_isInSystemHeader(location))
