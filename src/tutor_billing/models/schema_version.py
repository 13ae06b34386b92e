"""
Schema versioning for exported invoices.

Exported invoice snapshots carry a schema version so older audit files
can still be read after the export format changes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any


class SchemaVersion(Enum):
    """
    Invoice export schema versions.

    Versions:
        V1_0: Totals, adjustment lines and other charges
        V1_1: Adds payment due date, integrity warnings and other-charge dates
    """

    V1_0 = "1.0"
    V1_1 = "1.1"


CURRENT_SCHEMA_VERSION = SchemaVersion.V1_1


@dataclass
class VersionedData:
    """
    Data with version information.

    Attributes:
        schema_version: Version identifier
        data: Actual data content

    Examples:
        >>> versioned = VersionedData.wrap(billing_info.to_dict())
        >>> versioned.schema_version
        '1.1'
    """

    schema_version: str
    data: Dict[str, Any]

    @classmethod
    def wrap(cls, data: Dict[str, Any]) -> 'VersionedData':
        """Wrap data with the current schema version."""
        return cls(schema_version=CURRENT_SCHEMA_VERSION.value, data=data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "data": self.data
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'VersionedData':
        """
        Create instance from dictionary.

        Files written before versioning was introduced are read as 1.0.
        """
        return cls(
            schema_version=d.get("schema_version", SchemaVersion.V1_0.value),
            data=d.get("data", {})
        )

    @property
    def version_enum(self) -> SchemaVersion:
        return SchemaVersion(self.schema_version)

    @property
    def is_current(self) -> bool:
        return self.version_enum == CURRENT_SCHEMA_VERSION
