"""Option bag validation."""

from __future__ import annotations

from typing import Any, Callable, Mapping

import structlog

from .errors import ValidationError

logger = structlog.get_logger(__name__)

# A validator returns True when the value is acceptable, or a short
# description of the expected type otherwise.
OptionValidator = Callable[[Any, str], "bool | str"]


def _type_validator(expected: str, check: Callable[[Any], bool]) -> OptionValidator:
    def validate(value: Any, name: str) -> bool | str:
        return True if check(value) else expected

    return validate


boolean = _type_validator("boolean", lambda value: isinstance(value, bool))
function = _type_validator("function", callable)
string = _type_validator("string", lambda value: isinstance(value, str))
number = _type_validator(
    "number",
    lambda value: isinstance(value, (int, float)) and not isinstance(value, bool),
)


def optional(validator: OptionValidator) -> OptionValidator:
    """Accept ``None`` in addition to whatever *validator* accepts."""

    def validate(value: Any, name: str) -> bool | str:
        return True if value is None else validator(value, name)

    return validate


def assert_options(
    options: Any,
    schema: Mapping[str, OptionValidator],
    allow_unknown: bool = False,
) -> None:
    """Validate *options* against *schema*.

    Raises:
        ValidationError: ``ERR_BAD_OPTION_VALUE`` for the first option whose
            validator rejects it, ``ERR_BAD_OPTION`` for an unknown option
            when *allow_unknown* is false. Unknown options are logged as a
            warning otherwise.
    """
    if not isinstance(options, Mapping):
        raise ValidationError("options must be a mapping", "ERR_BAD_OPTION_VALUE")

    for name, value in options.items():
        validator = schema.get(name)
        if validator is not None:
            result = validator(value, name)
            if result is not True:
                raise ValidationError(
                    f"option {name} must be {result}", "ERR_BAD_OPTION_VALUE"
                )
            continue
        if not allow_unknown:
            raise ValidationError(f"Unknown option {name}", "ERR_BAD_OPTION")
        logger.warning("unknown_option", option=name)
