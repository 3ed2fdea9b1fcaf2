from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from structmapper.mapping import Assignment

_TEMPLATE_DIR = Path(__file__).with_name("templates")

CONSTRUCT = "construct"
POPULATE = "populate"


@lru_cache(maxsize=None)
def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(_TEMPLATE_DIR),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


@dataclass(frozen=True)
class MappingFunction:
    """One generated conversion function.

    `construct` builds a fresh target value from a source pointer,
    `populate` writes into an existing target and returns it.
    """

    kind: str
    name: str
    source_type: str
    target_type: str
    assignments: tuple[Assignment, ...]

    def __post_init__(self) -> None:
        if self.kind not in (CONSTRUCT, POPULATE):
            raise ValueError(f"unknown mapping function kind: {self.kind}")


@dataclass(frozen=True)
class MappingUnitContext:
    """Template inputs for one `...MappingExtensions` unit."""

    unit_name: str
    pair_key: str
    guard: str
    includes: tuple[str, ...]
    zero_init: str
    functions: tuple[MappingFunction, ...]

    @classmethod
    def create(
        cls,
        *,
        unit_name: str,
        pair_key: str,
        guard: str,
        includes: Iterable[str],
        zero_init: str,
        functions: Iterable[MappingFunction],
    ) -> "MappingUnitContext":
        unique_includes: list[str] = []
        for include in includes:
            if include and include not in unique_includes:
                unique_includes.append(include)
        return cls(
            unit_name=unit_name,
            pair_key=pair_key,
            guard=guard,
            includes=tuple(unique_includes),
            zero_init=zero_init,
            functions=tuple(functions),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "unit_name": self.unit_name,
            "pair_key": self.pair_key,
            "guard": self.guard,
            "includes": self.includes,
            "zero_init": self.zero_init,
            "functions": self.functions,
        }


def render_mapping_unit(context: MappingUnitContext) -> str:
    template = _get_env().get_template("mapping_extensions.h.j2")
    rendered = template.render(context.as_template_args())
    return rendered.rstrip("\n") + "\n"
