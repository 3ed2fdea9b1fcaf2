from .codegen import UNIT_NAME_FORMAT, GeneratedUnit, MappingEmitter
from .templates import MappingFunction, MappingUnitContext, render_mapping_unit

__all__ = [
    'GeneratedUnit',
    'MappingEmitter',
    'MappingFunction',
    'MappingUnitContext',
    'UNIT_NAME_FORMAT',
    'render_mapping_unit',
]
