from collections.abc import Mapping
from typing import Any, Iterable

from ..errors import ValidationError
from .protocol import ParameterType, ToolParameter

_MISSING = object()


def matches(parameter_type: ParameterType, value: Any) -> bool:
  match parameter_type:
    case ParameterType.STRING:
      return isinstance(value, str)
    case ParameterType.NUMBER:
      # bool is an int subclass, but true/false are not numbers on the wire
      return isinstance(value, (int, float)) and not isinstance(value, bool)
    case ParameterType.BOOLEAN:
      return isinstance(value, bool)
    case ParameterType.ARRAY:
      return isinstance(value, (list, tuple))
    case ParameterType.OBJECT:
      return isinstance(value, Mapping)
  return False


def validate_arguments(parameters: Iterable[ToolParameter], args: Mapping[str, Any]) -> None:
  """
  Check every declared parameter against the supplied arguments.

  Parameters are checked in declaration order and the first mismatch raises.
  Arguments that are not declared are passed through untouched.

  :raises ValidationError: naming the first parameter whose argument is
    missing or has the wrong type
  """
  if not isinstance(args, Mapping):
    raise ValidationError("arguments", "object", f"Tool arguments must be an object, got {type(args).__name__}")

  for parameter in parameters:
    value = args.get(parameter.name, _MISSING)
    if value is _MISSING or not matches(parameter.type, value):
      raise ValidationError(parameter.name, parameter.type.value)
