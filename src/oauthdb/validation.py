"""Schema validation for request parameters and OAuth service responses."""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from oauthdb.errors import InternalValidationError
from oauthdb.models import ClientId, ClientInfo, KeyDataRequestParams, ScopedKeyData, ScopeString

SCHEMAS: dict[str, TypeAdapter[Any]] = {
    "client_id": TypeAdapter(ClientId),
    "scope": TypeAdapter(ScopeString),
    "key_data_params": TypeAdapter(KeyDataRequestParams),
    "client_info": TypeAdapter(ClientInfo),
    "scoped_key_data": TypeAdapter(ScopedKeyData),
}


def validate(schema_name: str, value: Any) -> Any:
    """Validate a value against a named schema.

    Args:
        schema_name: One of the keys of ``SCHEMAS``.
        value: Value to check. Treated as untrusted.

    Returns:
        The validated value (a model instance for object schemas).

    Raises:
        KeyError: If the schema name is not registered.
        InternalValidationError: If the value does not match the schema.
    """
    adapter = SCHEMAS[schema_name]
    try:
        return adapter.validate_python(value)
    except ValidationError as e:
        raise to_internal_error(schema_name, e) from e


def to_internal_error(schema_name: str, error: ValidationError) -> InternalValidationError:
    """Convert a pydantic error into the local validation error."""
    errors = error.errors(include_url=False, include_input=False, include_context=False)
    return InternalValidationError(
        schema=schema_name,
        field=_field_path(errors[0]["loc"]) if errors else "",
        errors=[dict(err) for err in errors],
    )


def _field_path(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)
