from typing import Any, Callable, FrozenSet, Iterable, Optional, Sequence, Tuple, Type, Union
from .context import PgContext
from .models import DbObject

Names = Union[str, Iterable[str]]


class Exclusion:
    """
    Filter over diagnostic findings. Calling it returns True when the finding
    should be dropped from the result.

    Exclusions are pure and stateless beyond their construction parameters,
    so they can be shared between threads and reused across calls.
    """

    def __init__(self, predicate: Callable[[DbObject], bool], description: str = "custom"):
        self._predicate = predicate
        self.description = description

    def __call__(self, entity: DbObject) -> bool:
        return bool(self._predicate(entity))

    def and_(self, other: "Exclusion") -> "Exclusion":
        """Excludes only what both exclusions exclude."""
        return Exclusion(
            lambda entity: self(entity) and other(entity),
            f"({self.description} and {other.description})",
        )

    def or_(self, other: "Exclusion") -> "Exclusion":
        """Excludes what either exclusion excludes."""
        return Exclusion(
            lambda entity: self(entity) or other(entity),
            f"({self.description} or {other.description})",
        )

    __and__ = and_
    __or__ = or_

    def __repr__(self) -> str:
        return f"Exclusion({self.description})"


EXCLUDE_NOTHING = Exclusion(lambda _: False, "exclude_nothing")


def exclude_nothing() -> Exclusion:
    return EXCLUDE_NOTHING


def _normalize_names(names: Names, argument_name: str, context: Optional[PgContext] = None) -> FrozenSet[str]:
    if names is None:
        raise ValueError(f"{argument_name} cannot be None")
    if isinstance(names, str):
        names = [names]
    normalized = set()
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"{argument_name} cannot contain blank values")
        name = name.strip()
        if context is not None:
            name = context.enrich_with_schema(name)
        normalized.add(name.lower())
    return frozenset(normalized)


def _require_non_negative(value: Any, argument_name: str) -> None:
    if value is None or value < 0:
        raise ValueError(f"{argument_name} cannot be less than zero")


def _require_percentage(value: Any, argument_name: str) -> None:
    if value is None or value < 0 or value > 100:
        raise ValueError(f"{argument_name} should be in the range from 0.0 to 100.0 inclusive")


def _values_of(entity: DbObject, attributes: Sequence[str]):
    for attribute in attributes:
        value = getattr(entity, attribute, None)
        if value is None:
            continue
        if isinstance(value, str):
            yield value
        else:
            yield from value


def by_attribute(
    attributes: Union[str, Sequence[str]],
    names: Names,
    context: Optional[PgContext] = None,
) -> Exclusion:
    """
    Excludes findings whose attribute (a string or a tuple of strings) matches
    any of the given names, ignoring case. Findings without the attribute are kept.
    """
    if isinstance(attributes, str):
        attributes = (attributes,)
    attributes = tuple(attributes)
    wanted = _normalize_names(names, "names", context)

    def predicate(entity: DbObject) -> bool:
        return any(value.lower() in wanted for value in _values_of(entity, attributes))

    return Exclusion(predicate, f"by_attribute({', '.join(attributes)}={sorted(wanted)})")


def by_name(names: Names, context: Optional[PgContext] = None) -> Exclusion:
    """Excludes findings by the name of the reported object (index, table, function, ...)."""
    exclusion = by_attribute("names", names, context)
    exclusion.description = f"by_name({sorted(_normalize_names(names, 'names', context))})"
    return exclusion


def by_index_name(names: Names, context: Optional[PgContext] = None) -> Exclusion:
    return by_attribute(("index_name", "index_names"), names, context)


def by_table_name(names: Names, context: Optional[PgContext] = None) -> Exclusion:
    """Excludes any finding that belongs to one of the given tables."""
    return by_attribute("table_names", names, context)


def by_sequence_name(names: Names, context: Optional[PgContext] = None) -> Exclusion:
    return by_attribute("sequence_name", names, context)


def by_column_name(names: Names) -> Exclusion:
    return by_attribute("column_names", names)


def by_constraint_name(names: Names) -> Exclusion:
    return by_attribute(("constraint_name", "constraint_names"), names)


def by_size(threshold_in_bytes: int) -> Exclusion:
    """Excludes findings whose size is strictly greater than the threshold."""
    _require_non_negative(threshold_in_bytes, "threshold_in_bytes")

    def predicate(entity: DbObject) -> bool:
        size = entity.size_in_bytes
        return size is not None and size > threshold_in_bytes

    return Exclusion(predicate, f"by_size(>{threshold_in_bytes})")


def by_min_size(threshold_in_bytes: int, applies_to: Optional[Tuple[Type[DbObject], ...]] = None) -> Exclusion:
    """
    Excludes findings smaller than the threshold, e.g. tiny indexes nobody cares about.
    With applies_to, only findings of those types are considered.
    """
    _require_non_negative(threshold_in_bytes, "threshold_in_bytes")

    def predicate(entity: DbObject) -> bool:
        if applies_to is not None and not isinstance(entity, applies_to):
            return False
        size = entity.size_in_bytes
        return size is not None and size < threshold_in_bytes

    return Exclusion(predicate, f"by_min_size(<{threshold_in_bytes})")


def by_bloat(size_threshold_in_bytes: int, percentage_threshold: float) -> Exclusion:
    """
    Excludes bloat findings below either threshold. Zero thresholds exclude nothing.
    Findings that do not carry bloat figures are kept.
    """
    _require_non_negative(size_threshold_in_bytes, "size_threshold_in_bytes")
    _require_percentage(percentage_threshold, "percentage_threshold")

    def predicate(entity: DbObject) -> bool:
        bloat_size = getattr(entity, "bloat_size_in_bytes", None)
        bloat_percentage = getattr(entity, "bloat_percentage", None)
        if bloat_size is None or bloat_percentage is None:
            return False
        return bloat_size < size_threshold_in_bytes or bloat_percentage < percentage_threshold

    return Exclusion(predicate, f"by_bloat(<{size_threshold_in_bytes} bytes or <{percentage_threshold}%)")
