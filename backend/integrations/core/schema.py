# backend/integrations/core/schema.py
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class FieldSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: FieldType
    required: bool = False
    description: Optional[str] = None


ActionSchema = Dict[str, FieldSpec]

_PYTHON_TYPES = {
    FieldType.STRING: (str,),
    FieldType.NUMBER: (int, float),
    FieldType.INTEGER: (int,),
    FieldType.BOOLEAN: (bool,),
    FieldType.ARRAY: (list, tuple),
    FieldType.OBJECT: (dict,),
}


def conforms(field_type: FieldType, value: Any) -> bool:
    # bool is an int subclass but never a number here
    if isinstance(value, bool) and field_type is not FieldType.BOOLEAN:
        return False
    return isinstance(value, _PYTHON_TYPES[field_type])


def validate_params(schema: ActionSchema, params: Mapping[str, Any]) -> List[str]:
    """Return the problems found checking ``params`` against ``schema``.

    Required fields must be present and not None. Optional fields are only
    type-checked when a non-None value is supplied. Keys the schema does not
    mention are passed through untouched.
    """
    problems = []
    for name, spec in schema.items():
        value = params.get(name)
        if value is None:
            if spec.required:
                problems.append(f"missing required field '{name}'")
            continue
        if not conforms(spec.type, value):
            problems.append(
                f"field '{name}' must be of type {spec.type.value}, got {type(value).__name__}"
            )
    return problems
