from .annotations import Directive, parse_annotation
from .c_parser import CParser
from .struct_info import FieldInfo, StructInfo

__all__ = [
    'CParser',
    'Directive',
    'FieldInfo',
    'StructInfo',
    'parse_annotation',
]
