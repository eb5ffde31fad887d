"""
Field handler registry
Maps tag names to the attribute they fill and the routine that reads them
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..nbt.constants import TagKind


@dataclass(frozen=True)
class FieldSpec:
    """How one named tag is decoded"""
    name: str
    kind: TagKind
    attribute: str
    read: Callable[[Any], Any]


class FieldRegistry:
    """
    Registry for named field handlers
    Anything not registered is rejected by the parser
    """

    def __init__(self, label: str):
        self.label = label
        self._fields: Dict[str, FieldSpec] = {}

    def register(self,
                 name: str,
                 kind: TagKind,
                 attribute: str,
                 read: Callable[[Any], Any]) -> FieldSpec:
        """
        Register a handler for a tag name

        Args:
            name: Tag name as it appears in the stream
            kind: Tag kind the stream must declare for this name
            attribute: Attribute of the decoded record the value is stored in
            read: Callable taking the parser and returning the decoded value
        """
        spec = FieldSpec(name, kind, attribute, read)
        self._fields[name] = spec
        return spec

    def unregister(self, name: str):
        self._fields.pop(name, None)

    def get(self, name: str) -> Optional[FieldSpec]:
        return self._fields.get(name)

    def supports_field(self, name: str) -> bool:
        return name in self._fields

    def list_supported_fields(self) -> Dict[str, str]:
        """Map of supported tag names to their declared kind names"""
        return {name: spec.kind.name for name, spec in self._fields.items()}

    def copy(self) -> 'FieldRegistry':
        clone = FieldRegistry(self.label)
        clone._fields = dict(self._fields)
        return clone

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: str) -> bool:
        return name in self._fields
