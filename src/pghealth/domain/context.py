import re
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from ..exceptions import InvalidIdentifier

DEFAULT_SCHEMA_NAME = "public"
DEFAULT_BLOAT_PERCENTAGE_THRESHOLD = 10.0
DEFAULT_REMAINING_PERCENTAGE_THRESHOLD = 10.0

# PostgreSQL truncates identifiers longer than NAMEDATALEN - 1 bytes
MAX_IDENTIFIER_LENGTH = 63

_UNQUOTED_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")
_QUOTED_IDENTIFIER = re.compile(r'^"(?:[^"]|"")+"$')


def validate_identifier(value: Any) -> str:
    """
    Validates a schema name and returns it in the form the catalog stores it.

    Unquoted identifiers are folded to lower case, as PostgreSQL does.
    Quoted identifiers keep their case and have doubled quotes unescaped.
    Anything else raises InvalidIdentifier and never reaches a query.
    """
    if not isinstance(value, str):
        raise InvalidIdentifier(value)
    candidate = value.strip()
    if _UNQUOTED_IDENTIFIER.match(candidate):
        if len(candidate) > MAX_IDENTIFIER_LENGTH:
            raise InvalidIdentifier(value)
        return candidate.lower()
    if _QUOTED_IDENTIFIER.match(candidate):
        unquoted = candidate[1:-1].replace('""', '"')
        if "\x00" in unquoted or len(unquoted.encode("utf-8")) > MAX_IDENTIFIER_LENGTH:
            raise InvalidIdentifier(value)
        return unquoted
    raise InvalidIdentifier(value)


_PLAIN_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def quote_identifier(name: str) -> str:
    """Renders a catalog name the way quote_ident() and regclass output do."""
    # TODO: quote reserved keywords too, regclass output renders a schema named user as "user"
    if _PLAIN_IDENTIFIER.match(name):
        return name
    return '"' + name.replace('"', '""') + '"'


class PgContext(BaseModel):
    """
    Per-call parameters shared by every diagnostic query.
    The schema name is validated on construction; an invalid one raises InvalidIdentifier.
    """
    model_config = ConfigDict(frozen=True)

    schema_name: str = DEFAULT_SCHEMA_NAME
    bloat_percentage_threshold: float = Field(default=DEFAULT_BLOAT_PERCENTAGE_THRESHOLD, ge=0.0, le=100.0)
    remaining_percentage_threshold: float = Field(default=DEFAULT_REMAINING_PERCENTAGE_THRESHOLD, ge=0.0, le=100.0)
    statement_timeout_ms: Optional[int] = Field(default=None, gt=0)

    @field_validator("schema_name", mode="before")
    @classmethod
    def _check_schema_name(cls, value: Any) -> str:
        return validate_identifier(value)

    @property
    def is_default_schema(self) -> bool:
        return self.schema_name == DEFAULT_SCHEMA_NAME

    def enrich_with_schema(self, object_name: str) -> str:
        """
        Prefixes an object name with the schema unless the schema is the default one.
        The schema is quoted when needed so the result matches regclass text output.
        """
        if not object_name or not object_name.strip():
            raise ValueError("object_name cannot be blank")
        if self.is_default_schema:
            return object_name
        prefix = quote_identifier(self.schema_name) + "."
        if object_name.lower().startswith(prefix.lower()):
            return object_name
        raw_prefix = self.schema_name + "."
        if object_name.startswith(raw_prefix):
            return prefix + object_name[len(raw_prefix):]
        return prefix + object_name


def make_context(schema_name: Optional[str] = None, **overrides: Any) -> PgContext:
    if schema_name is None:
        return PgContext(**overrides)
    return PgContext(schema_name=schema_name, **overrides)


DEFAULT_CONTEXT = PgContext()
