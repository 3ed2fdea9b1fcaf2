from typing import Mapping, Sequence

from structmapper import logging as structmapper_logging

from .mapping_types import (Assignment, AssignmentPlan, ConversionPair,
                            MappingRecord, TypeDescriptor)

logger = structmapper_logging.get_logger(__name__)


def plan(source: TypeDescriptor, target: TypeDescriptor, *, match_target_renames: bool = True) -> AssignmentPlan:
    """Compute the field assignments for converting `source` into `target`.

    For each source member, in declaration order: ignored members are
    skipped; a target member of the same name wins; otherwise the member's
    rename is looked up; otherwise, with `match_target_renames`, a target
    member renamed to the source member's name. That fallback never picks
    an ignored target member, one named like a source member, or one an
    earlier member already took. Members left without a match are dropped.
    """
    assignments = []
    ignored = []
    unmatched = []
    source_names = {member.name for member in source.members}
    bound: set[str] = set()

    for member in source.members:
        if member.ignore:
            ignored.append(member.name)
            continue

        matched = target.find_member(member.name)
        if matched is None and member.rename is not None:
            matched = target.find_member(member.rename)
        if matched is None and match_target_renames:
            matched = target.find_member_renamed_to(member.name, exclude=source_names | bound)

        if matched is None:
            unmatched.append(member.name)
            continue
        bound.add(matched.name)
        assignments.append(Assignment(source_member=member.name, target_member=matched.name))

    if unmatched:
        logger.debug("%s -> %s: no target member for %s", source.identity, target.identity, ", ".join(unmatched))

    return AssignmentPlan(
        source=source.identity,
        target=target.identity,
        assignments=tuple(assignments),
        ignored=tuple(ignored),
        unmatched=tuple(unmatched),
    )


def plan_pairs(index: Mapping[str, TypeDescriptor], pairs: Sequence[ConversionPair], *, match_target_renames: bool = True) -> list[MappingRecord]:
    """Plan both directions of every pair; the reverse plan only for bidirectional pairs."""
    records = []
    for pair in pairs:
        source = index[pair.source]
        target = index[pair.target]
        forward = plan(source, target, match_target_renames=match_target_renames)
        reverse = None
        if pair.bidirectional:
            reverse = plan(target, source, match_target_renames=match_target_renames)
        records.append(MappingRecord(pair=pair, forward=forward, reverse=reverse))
    return records
