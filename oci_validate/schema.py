#!/usr/bin/env python3
"""
Static field schema for OCI configuration records.

Every record in oci.py declares a FIELDS tuple describing its members:

    Field("cwd", STRING)                       # required text
    Field("env", LIST, omitempty=True)         # may be omitted
    Field("mounts", LIST, omitempty=True, schema=OCIMount)
    Field("seccomp", REFERENCE, omitempty=True, schema=OCISeccomp)

A field without the omitempty marker is mandatory. The presence checker
walks these declarations instead of inspecting objects at runtime.

Field kinds:
- REFERENCE: optional handle to a nested record (None when absent)
- STRING:    text, mandatory means non-empty
- LIST:      sequence, mandatory means non-empty; record elements are walked
- MAP:       mapping, mandatory means non-empty; record values are walked
- RECORD:    nested record that is always present; walked, never flagged
- SCALAR:    number or boolean, never checked
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FieldKind(Enum):
    """How the presence checker treats a field."""

    REFERENCE = "reference"
    STRING = "string"
    LIST = "list"
    MAP = "map"
    RECORD = "record"
    SCALAR = "scalar"


REFERENCE = FieldKind.REFERENCE
STRING = FieldKind.STRING
LIST = FieldKind.LIST
MAP = FieldKind.MAP
RECORD = FieldKind.RECORD
SCALAR = FieldKind.SCALAR


@dataclass(frozen=True)
class Field:
    """A single member of a record schema."""

    name: str
    kind: FieldKind
    omitempty: bool = False
    # Record type (carrying its own FIELDS) for REFERENCE/RECORD fields,
    # or for the elements of LIST/MAP fields.
    schema: Optional[Any] = None

    @property
    def required(self) -> bool:
        return not self.omitempty
