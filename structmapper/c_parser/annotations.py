from typing import NamedTuple, Optional

from structmapper import logging as structmapper_logging
from structmapper.data_types import DirectiveKind

logger = structmapper_logging.get_logger(__name__)

ANNOTATION_PREFIX = "structmapper."

_KIND_BY_KEYWORD = {
    "map_from": DirectiveKind.MAP_FROM,
    "map_to": DirectiveKind.MAP_TO,
    "ignore": DirectiveKind.IGNORE,
    "name": DirectiveKind.NAME,
}

# directives that take no argument
_NULLARY = {DirectiveKind.IGNORE}


class Directive(NamedTuple):
    kind: DirectiveKind
    arguments: tuple[str, ...]


def parse_annotation(text: str) -> Optional[Directive]:
    """Parse one `annotate("...")` payload.

    Returns None for annotations that do not belong to structmapper or that
    name an unknown directive. `structmapper.map_to=A, B` yields
    `Directive(MAP_TO, ("A", "B"))`.
    """
    text = text.strip()
    if not text.startswith(ANNOTATION_PREFIX):
        return None
    body = text[len(ANNOTATION_PREFIX):]
    keyword, sep, raw_args = body.partition("=")
    kind = _KIND_BY_KEYWORD.get(keyword.strip())
    if kind is None:
        logger.warning("Ignoring unknown structmapper annotation: %s", text)
        return None
    if kind in _NULLARY:
        return Directive(kind, ())
    if not sep:
        logger.warning("Ignoring structmapper annotation without arguments: %s", text)
        return None
    # `#__VA_ARGS__` keeps the spaces around commas
    arguments = tuple(arg.strip() for arg in raw_args.split(",") if arg.strip())
    if not arguments:
        logger.warning("Ignoring structmapper annotation without arguments: %s", text)
        return None
    return Directive(kind, arguments)
