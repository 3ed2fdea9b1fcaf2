from .structmapper import GenerateResult, StructMapper

__all__ = [
    'GenerateResult',
    'StructMapper',
]
