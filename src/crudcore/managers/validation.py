"""Field validation rules compiled to JSON Schema.

Rules are declared per field as ``"required|email|max:255"`` or as a list of
rule strings. ``required`` and ``nullable`` are presence rules handled here;
everything else becomes a JSON Schema fragment checked by jsonschema.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from jsonschema import Draft202012Validator, FormatChecker
from jsonschema import ValidationError as SchemaValidationError

from ..errors import ManagerConfigError

FieldRules = Union[str, Sequence[str]]

TYPE_RULES = {
    "string": "string",
    "integer": "integer",
    "numeric": "number",
    "boolean": "boolean",
    "array": "array",
}

TYPE_PHRASES = {
    "string": "a string",
    "integer": "an integer",
    "number": "a number",
    "boolean": "true or false",
    "array": "an array",
}

_FORMAT_CHECKER = FormatChecker()


def split_rules(rules: FieldRules) -> List[str]:
    if isinstance(rules, str):
        return [rule.strip() for rule in rules.split("|") if rule.strip()]
    if isinstance(rules, (list, tuple)):
        parsed: List[str] = []
        for rule in rules:
            if not isinstance(rule, str):
                raise ManagerConfigError(f"Validation rule {rule!r} must be a string.")
            parsed.extend(split_rules(rule))
        return parsed
    raise ManagerConfigError(f"Validation rules must be a string or a list, {type(rules).__name__} given.")


def _number(field: str, rule: str, raw: str) -> Union[int, float]:
    try:
        return int(raw)
    except ValueError:
        try:
            return float(raw)
        except ValueError:
            raise ManagerConfigError(f"Rule {rule} on field {field} needs a numeric argument.") from None


def _declared_type(rules: List[str]) -> Optional[str]:
    for rule in rules:
        if rule in TYPE_RULES:
            return TYPE_RULES[rule]
        if rule == "email":
            return "string"
    return None


def _runtime_type(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return None


def compile_field(field: str, rules: List[str], value: Any = None) -> Tuple[Dict[str, Any], bool, bool]:
    """
    Compile one field's rules.

    Returns:
        (json_schema, required, nullable)
    """
    schema: Dict[str, Any] = {}
    required = False
    nullable = False
    size_type = _declared_type(rules) or _runtime_type(value)

    for rule in rules:
        name, _, argument = rule.partition(":")
        if name == "required":
            required = True
        elif name == "nullable":
            nullable = True
        elif name in TYPE_RULES:
            schema["type"] = TYPE_RULES[name]
        elif name == "email":
            schema["type"] = "string"
            schema["format"] = "email"
        elif name in ("min", "max"):
            bound = _number(field, rule, argument)
            if size_type == "string":
                schema["minLength" if name == "min" else "maxLength"] = int(bound)
            elif size_type == "array":
                schema["minItems" if name == "min" else "maxItems"] = int(bound)
            elif size_type in ("number", "integer"):
                schema["minimum" if name == "min" else "maximum"] = bound
        elif name == "in":
            schema["enum"] = [option.strip() for option in argument.split(",")]
        elif name == "regex":
            schema["pattern"] = argument
        else:
            raise ManagerConfigError(f"Unknown validation rule {rule} on field {field}.")

    return schema, required, nullable


def _message(field: str, error: SchemaValidationError) -> str:
    keyword = error.validator
    value = error.validator_value
    if keyword == "type":
        return f"The {field} field must be {TYPE_PHRASES.get(value, value)}."
    if keyword == "format" and value == "email":
        return f"The {field} field must be a valid email address."
    if keyword == "minLength":
        return f"The {field} field must be at least {value} characters."
    if keyword == "maxLength":
        return f"The {field} field must not be greater than {value} characters."
    if keyword == "minimum":
        return f"The {field} field must be at least {value}."
    if keyword == "maximum":
        return f"The {field} field must not be greater than {value}."
    if keyword == "minItems":
        return f"The {field} field must have at least {value} items."
    if keyword == "maxItems":
        return f"The {field} field must not have more than {value} items."
    if keyword == "enum":
        return f"The selected {field} is invalid."
    if keyword == "pattern":
        return f"The {field} field format is invalid."
    return f"The {field} field is invalid: {error.message}"


def _is_missing(inputs: Mapping[str, Any], field: str) -> bool:
    if field not in inputs:
        return True
    value = inputs[field]
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, dict)) and not value:
        return True
    return False


def validate_inputs(inputs: Mapping[str, Any], rule_set: Mapping[str, FieldRules]) -> List[str]:
    """
    Check inputs against a rule set.

    Returns:
        One message per failure, in rule-set field order. Empty when valid.
    """
    messages: List[str] = []
    for field, field_rules in rule_set.items():
        rules = split_rules(field_rules)
        value = inputs.get(field)
        schema, required, _ = compile_field(field, rules, value)

        # Absent, null and blank values only fail the required rule
        if _is_missing(inputs, field):
            if required:
                messages.append(f"The {field} field is required.")
            continue

        if not schema:
            continue

        validator = Draft202012Validator(schema, format_checker=_FORMAT_CHECKER)
        errors = sorted(validator.iter_errors(value), key=lambda e: str(e.validator))
        # One message per field: the type error first when there is one
        type_errors = [e for e in errors if e.validator == "type"]
        first = type_errors[0] if type_errors else (errors[0] if errors else None)
        if first is not None:
            messages.append(_message(field, first))

    return messages
