from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from structmapper import logging as structmapper_logging, utils
from structmapper.data_types import SelfPairPolicy, SourceLanguage
from structmapper.mapping import (AssignmentPlan, ConversionPair,
                                  MappingRecord, TypeDescriptor)

from .templates import (CONSTRUCT, POPULATE, MappingFunction,
                        MappingUnitContext, render_mapping_unit)

logger = structmapper_logging.get_logger(__name__)

UNIT_NAME_FORMAT = "{source}{target}MappingExtensions"
DEFAULT_TO_FUNCTION = "{source}_to_{target}"
DEFAULT_FROM_FUNCTION = "{target}_from_{source}"

_ZERO_INIT = {
    SourceLanguage.C: "{0}",
    SourceLanguage.CXX: "{}",
}


@dataclass(frozen=True)
class GeneratedUnit:
    name: str
    pair: ConversionPair
    text: str
    headers: tuple[str, ...]


def _check_pattern(pattern: str, option: str) -> str:
    try:
        pattern.format(source="Source", target="Target")
    except (KeyError, IndexError) as exc:
        raise ValueError(f"Invalid {option} pattern {pattern!r}: only {{source}} and {{target}} are allowed") from exc
    return pattern


class MappingEmitter:
    def __init__(
        self,
        index: Mapping[str, TypeDescriptor],
        *,
        self_pairs: SelfPairPolicy | str = SelfPairPolicy.SKIP,
        to_function: str = DEFAULT_TO_FUNCTION,
        from_function: str = DEFAULT_FROM_FUNCTION,
        guard_prefix: str = "STRUCTMAPPER_",
        language: SourceLanguage | str = SourceLanguage.C,
    ):
        self.index = index
        self.self_pairs = SelfPairPolicy(self_pairs)
        self.to_function = _check_pattern(to_function, "to_function")
        self.from_function = _check_pattern(from_function, "from_function")
        self.guard_prefix = guard_prefix
        self.language = SourceLanguage(language)

    @classmethod
    def from_config(cls, index: Mapping[str, TypeDescriptor], config: dict) -> "MappingEmitter":
        generation_cfg = config.get("generation", {})
        scan_cfg = config.get("scan", {})
        return cls(
            index,
            self_pairs=generation_cfg.get("self_pairs", SelfPairPolicy.SKIP.value),
            to_function=generation_cfg.get("to_function", DEFAULT_TO_FUNCTION),
            from_function=generation_cfg.get("from_function", DEFAULT_FROM_FUNCTION),
            guard_prefix=generation_cfg.get("guard_prefix", "STRUCTMAPPER_"),
            language=scan_cfg.get("language", SourceLanguage.C.value),
        )

    def unit_name(self, pair: ConversionPair) -> str:
        return UNIT_NAME_FORMAT.format(
            source=self.index[pair.source].name,
            target=self.index[pair.target].name,
        )

    def qualified_unit_name(self, pair: ConversionPair) -> str:
        """Unit name built from full identities, for short-name collisions."""
        return UNIT_NAME_FORMAT.format(
            source=utils.identifier_slug(pair.source),
            target=utils.identifier_slug(pair.target),
        )

    def headers_for(self, pair: ConversionPair) -> tuple[str, ...]:
        headers = []
        for identity in (pair.source, pair.target):
            header = self.index[identity].header
            if header and header not in headers:
                headers.append(header)
        return tuple(headers)

    def should_emit(self, pair: ConversionPair) -> bool:
        return not pair.is_self_pair or self.self_pairs == SelfPairPolicy.EMIT

    def _functions_for(self, plan: AssignmentPlan) -> list[MappingFunction]:
        source = self.index[plan.source]
        target = self.index[plan.target]
        return [
            MappingFunction(
                kind=CONSTRUCT,
                name=self.to_function.format(source=source.name, target=target.name),
                source_type=source.spelling,
                target_type=target.spelling,
                assignments=plan.assignments,
            ),
            MappingFunction(
                kind=POPULATE,
                name=self.from_function.format(source=source.name, target=target.name),
                source_type=source.spelling,
                target_type=target.spelling,
                assignments=plan.assignments,
            ),
        ]

    def emit(
        self,
        record: MappingRecord,
        *,
        includes: Optional[Sequence[str]] = None,
        unit_name: Optional[str] = None,
    ) -> Optional[GeneratedUnit]:
        """Render the conversion functions of one record.

        Returns None for a self pair under the `skip` policy.
        """
        pair = record.pair
        if not self.should_emit(pair):
            logger.info("Skipping self mapping %s", pair.key)
            return None

        name = unit_name or self.unit_name(pair)
        headers = self.headers_for(pair)
        functions = self._functions_for(record.forward)
        if pair.bidirectional and record.reverse is not None:
            functions.extend(self._functions_for(record.reverse))

        context = MappingUnitContext.create(
            unit_name=name,
            pair_key=pair.key,
            guard=f"{self.guard_prefix}{utils.identifier_slug(name).upper()}_H",
            includes=headers if includes is None else includes,
            zero_init=_ZERO_INIT[self.language],
            functions=functions,
        )
        return GeneratedUnit(name=name, pair=pair, text=render_mapping_unit(context), headers=headers)
