from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

FORM_ERROR = "form"


def field_errors(exc: ValidationError) -> Dict[str, str]:
    """First message per field, keyed by field name."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else FORM_ERROR
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


class Form:
    """Field values bound to a validation schema.

    ``validate`` parses the current values; on failure it records one message
    per field in ``errors`` and returns None, so nothing is submitted.
    """

    def __init__(self, schema: Type[BaseModel], defaults: Mapping[str, Any]):
        self.schema = schema
        self.defaults = dict(defaults)
        self.values: Dict[str, Any] = dict(defaults)
        self.errors: Dict[str, str] = {}

    def set_value(self, name: str, value: Any) -> None:
        if name not in self.defaults:
            raise KeyError(f"{self.schema.__name__} has no field {name!r}")
        self.values[name] = value
        self.errors.pop(name, None)

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            self.set_value(name, value)

    def validate(self) -> Optional[BaseModel]:
        try:
            parsed = self.schema.model_validate(self.values)
        except ValidationError as exc:
            self.errors = field_errors(exc)
            return None
        self.errors = {}
        return parsed

    def reset(self, **defaults: Any) -> None:
        self.defaults.update(defaults)
        self.values = dict(self.defaults)
        self.errors = {}

    @property
    def is_pristine(self) -> bool:
        return self.values == self.defaults
