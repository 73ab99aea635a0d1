"""Enum conversion utilities"""

from enum import Enum
from typing import Any, List, Type, TypeVar

# Generic type for any Enum subclass
E = TypeVar("E", bound=Enum)


class EnumHelper:
    """
    Utility class for working with Enums read from YAML or JSON:
    - Parse names or values back to enum members (case-insensitive)
    - List member values for error details
    """

    @staticmethod
    def to_enum(enum_class: Type[E], value: Any) -> E:
        """
        Convert a member name or value to an enum instance.

        Args:
            enum_class: Enum class to parse into
            value: Member, member name ("WARN") or member value ("warn")

        Raises:
            ValueError: no member matches
            TypeError: value is neither a str nor a member
        """
        if isinstance(value, enum_class):
            return value
        if isinstance(value, str):
            key = value.strip()
            try:
                return enum_class[key.upper()]
            except KeyError:
                pass
            for member in enum_class:
                if isinstance(member.value, str) and member.value.lower() == key.lower():
                    return member
            raise ValueError(f"Invalid enum value '{value}' for {enum_class.__name__}")
        raise TypeError(f"Expected str or {enum_class.__name__}, got {type(value)}")

    @staticmethod
    def list_values(enum_class: Type[E]) -> List[Any]:
        """List all Enum member values (for Enums with custom .value)"""
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")
        return [member.value for member in enum_class]
