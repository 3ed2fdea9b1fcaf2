from .assignment_planner import plan, plan_pairs
from .extraction import extract
from .mapping_types import (Assignment, AssignmentPlan, ConversionPair,
                            MappingRecord, MemberDescriptor, TypeDescriptor,
                            TypeIndex, pair_key)
from .pair_resolver import resolve

__all__ = [
    'Assignment',
    'AssignmentPlan',
    'ConversionPair',
    'MappingRecord',
    'MemberDescriptor',
    'TypeDescriptor',
    'TypeIndex',
    'extract',
    'pair_key',
    'plan',
    'plan_pairs',
    'resolve',
]
