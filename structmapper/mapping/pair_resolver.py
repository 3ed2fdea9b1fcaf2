from typing import Sequence

from structmapper import logging as structmapper_logging

from .mapping_types import ConversionPair, TypeDescriptor, pair_key

logger = structmapper_logging.get_logger(__name__)


def resolve(descriptors: Sequence[TypeDescriptor]) -> list[ConversionPair]:
    """Collapse the map-from/map-to directives of `descriptors` into conversion pairs.

    Pairs are keyed by "Source->Target" and returned in insertion order.
    A repeated direction is a no-op. A map-to whose reverse pair already
    exists turns that pair bidirectional instead of adding a second one,
    whichever directive created it.
    """
    pairs: dict[str, ConversionPair] = {}

    for descriptor in descriptors:
        for directive in descriptor.map_from:
            for source in directive:
                key = pair_key(source, descriptor.identity)
                if key not in pairs:
                    pairs[key] = ConversionPair(key=key, source=source, target=descriptor.identity)

        for directive in descriptor.map_to:
            for target in directive:
                key = pair_key(descriptor.identity, target)
                reverse_key = pair_key(target, descriptor.identity)
                existing = pairs.get(reverse_key)
                if existing is not None:
                    # a self pair is its own reverse, never bidirectional
                    if existing.key != key:
                        existing.bidirectional = True
                elif key not in pairs:
                    pairs[key] = ConversionPair(key=key, source=descriptor.identity, target=target)

    logger.debug("Resolved %d conversion pairs (%d bidirectional)",
                 len(pairs), sum(1 for p in pairs.values() if p.bidirectional))
    return list(pairs.values())
