#!/usr/bin/env python3
"""
Mandatory field checking for OCI configurations.

Walks a configuration along the FIELDS schema each record declares and
reports every mandatory field left empty. Unlike the semantic checks, this
never stops at the first problem: the whole tree is visited so that one run
lists every missing field.

Messages name the field by its JSON path from the root label:

    config.process.cwd should not be empty.
    config.mounts[1].type should not be empty.
    config.linux.seccomp.syscalls[0].args[2].op should not be empty.

Numbers and booleans are never reported; their zero value is accepted.
"""

import logging
from typing import Any, List, Sequence, Tuple

from oci_validate.oci import OCIConfig
from oci_validate.schema import LIST, MAP, RECORD, REFERENCE, STRING, Field

logger = logging.getLogger(__name__)

ROOT_LABEL = "config"


def _missing(label: str) -> str:
    return f"{label} should not be empty."


def check_mandatory(
    node: Any, fields: Sequence[Field], parent: str
) -> Tuple[List[str], bool]:
    """
    Check the mandatory fields of a record and everything below it.

    Args:
        node: Record instance to check
        fields: Schema of the record (its FIELDS)
        parent: Label of the record, used as message prefix

    Returns:
        (messages, valid)
    """
    msgs: List[str] = []
    valid = True

    for fld in fields:
        value = getattr(node, fld.name)
        label = f"{parent}.{fld.name}"

        if fld.kind is REFERENCE:
            if value is None:
                if fld.required:
                    msgs.append(_missing(label))
                    valid = False
                continue
            sub_msgs, ok = check_mandatory(value, fld.schema.FIELDS, label)
            msgs.extend(sub_msgs)
            valid = valid and ok

        elif fld.kind is RECORD:
            sub_msgs, ok = check_mandatory(value, fld.schema.FIELDS, label)
            msgs.extend(sub_msgs)
            valid = valid and ok

        elif fld.kind is STRING:
            if fld.required and not value:
                msgs.append(_missing(label))
                valid = False

        elif fld.kind is LIST:
            if fld.required and not value:
                msgs.append(_missing(label))
                valid = False
                continue
            if fld.schema is None:
                continue
            for index, item in enumerate(value or ()):
                sub_msgs, ok = check_mandatory(
                    item, fld.schema.FIELDS, f"{label}[{index}]"
                )
                msgs.extend(sub_msgs)
                valid = valid and ok

        elif fld.kind is MAP:
            if fld.required and not value:
                msgs.append(_missing(label))
                valid = False
                continue
            if fld.schema is None:
                continue
            for key, item in (value or {}).items():
                sub_msgs, ok = check_mandatory(
                    item, fld.schema.FIELDS, f"{label}[{key}]"
                )
                msgs.extend(sub_msgs)
                valid = valid and ok

        # SCALAR fields are never checked

    return msgs, valid


def check_mandatory_fields(config: OCIConfig) -> Tuple[List[str], bool]:
    """Check every mandatory field of a configuration."""
    msgs, valid = check_mandatory(config, OCIConfig.FIELDS, ROOT_LABEL)
    logger.debug("Presence check found %d missing field(s)", len(msgs))
    return msgs, valid
