"""JSON serialization of objects, including variants selected by an enum field."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, MutableMapping, Optional, Tuple, Type, TypeVar

from edassist.enum_meta import EnumMetadata

_log = logging.getLogger(__name__)

E = TypeVar("E")
S = TypeVar("S", bound="JsonSerializable")


class JsonSerializable(ABC):
    """An object that converts to and from a JSON object."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object for this instance."""

    @abstractmethod
    def load_dict(self, data: Mapping[str, Any]) -> None:
        """Update this instance from a JSON object; missing fields are left as they are."""

    def to_json(self, pretty: bool = False) -> str:
        """Return this instance as JSON text."""
        if pretty:
            return json.dumps(self.to_dict(), indent="\t", ensure_ascii=False)
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def from_json(self: S, text: str) -> S:
        """Load this instance from JSON text, raising ValueError if it is not an object."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"JSON value is not an object: {text}")
        self.load_dict(data)
        return self


class VariantSerializer(Generic[E]):
    """Serializes a variant whose type is named by an enum field beside it."""

    def __init__(
        self,
        type_field_name: str,
        variant_field_name: str,
        metadata: EnumMetadata[E],
        types: Mapping[E, Type[JsonSerializable]],
    ) -> None:
        self.type_field_name = type_field_name
        self.variant_field_name = variant_field_name
        self.metadata = metadata
        self.types = dict(types)

    def save(
        self,
        type_value: E,
        variant: Optional[JsonSerializable],
        target: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        """Write the type string and variant object into ``target`` and return it.

        Nothing is written when the variant is not one of the registered types.
        """
        if variant is not None and type(variant) in self.types.values():
            target[self.type_field_name] = self.metadata.to_string(type_value)
            target[self.variant_field_name] = variant.to_dict()
        return target

    def load(self, source: Mapping[str, Any]) -> Tuple[Optional[E], Optional[JsonSerializable]]:
        """Read the enum value and the variant it selects from ``source``.

        Either item is None when it cannot be determined.
        """
        type_text = source.get(self.type_field_name)
        type_value = self.metadata.from_string(type_text) if isinstance(type_text, str) else None
        variant_type = self.types.get(type_value) if type_value is not None else None
        if variant_type is None:
            return type_value, None
        data = source.get(self.variant_field_name)
        if not isinstance(data, dict):
            _log.warning(
                "Failed to load variant from field '%s' as it is missing.",
                self.variant_field_name,
            )
            return type_value, None
        variant = variant_type()
        variant.load_dict(data)
        return type_value, variant