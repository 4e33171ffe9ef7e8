"""Mapping between enum members and the strings used to serialize them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, Optional, Sequence, Tuple, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class EnumValueDescription(Generic[T]):
    """An enum value and the string that describes it."""

    value: T
    description: str


def get_enum_value_description(
    descriptions: Iterable[EnumValueDescription[T]], value: T
) -> Optional[str]:
    """Return the description of ``value``, or None if it has none."""
    return next((entry.description for entry in descriptions if entry.value == value), None)


def get_enum_value_from_description(
    descriptions: Iterable[EnumValueDescription[T]],
    description: str,
    ignore_case: bool = False,
) -> Optional[T]:
    """Return the value whose description matches ``description``, or None."""
    if ignore_case:
        wanted = description.lower()
        matches = (entry.value for entry in descriptions if entry.description.lower() == wanted)
    else:
        matches = (entry.value for entry in descriptions if entry.description == description)
    return next(matches, None)


class EnumMetadata(Generic[T]):
    """The ordered set of descriptions for an enum, with string conversions."""

    def __init__(
        self,
        descriptions: Iterable[Union[EnumValueDescription[T], Tuple[T, str]]],
    ) -> None:
        self.descriptions: Sequence[EnumValueDescription[T]] = tuple(
            entry if isinstance(entry, EnumValueDescription) else EnumValueDescription(*entry)
            for entry in descriptions
        )

    def __len__(self) -> int:
        return len(self.descriptions)

    def values(self) -> list[T]:
        """Return the described values in declaration order."""
        return [entry.value for entry in self.descriptions]

    def to_string(self, value: T) -> str:
        """Return the description of ``value``, or an empty string if it has none."""
        description = get_enum_value_description(self.descriptions, value)
        return "" if description is None else description

    def from_string(self, text: str, default: Optional[T] = None) -> Optional[T]:
        """Return the value described exactly by ``text``, or ``default``."""
        value = get_enum_value_from_description(self.descriptions, text)
        return default if value is None else value