import logging
from typing import Dict, List, Sequence, TypeVar
from ..domain.models import DbObject

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DbObject)


def union(results_per_host: Sequence[Sequence[T]]) -> List[T]:
    """
    A finding reported by any host is kept.
    Duplicates (same natural key) collapse to the first occurrence.
    """
    merged: Dict[T, T] = {}
    for host_result in results_per_host:
        for entity in host_result:
            merged.setdefault(entity, entity)
    result = sorted(merged.values())
    logger.debug(
        "Union of %d host result(s) with sizes %s -> %d finding(s)",
        len(results_per_host), [len(r) for r in results_per_host], len(result),
    )
    return result


def intersection(results_per_host: Sequence[Sequence[T]]) -> List[T]:
    """
    A finding is kept only if every host reports it.
    Instances from the first host are returned. No hosts means no findings.
    """
    if not results_per_host:
        logger.debug("Intersection of zero host results -> 0 findings")
        return []

    merged: Dict[T, T] = {}
    for entity in results_per_host[0]:
        merged.setdefault(entity, entity)
    for host_result in results_per_host[1:]:
        seen = set(host_result)
        merged = {key: entity for key, entity in merged.items() if key in seen}
        if not merged:
            break

    result = sorted(merged.values())
    logger.debug(
        "Intersection of %d host result(s) with sizes %s -> %d finding(s)",
        len(results_per_host), [len(r) for r in results_per_host], len(result),
    )
    return result
