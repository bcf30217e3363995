"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/parser.py
Reads raw MAME catalogs and software lists, and reads/writes normalized record-set files.

Raw catalog shape:
    <mame>
      <machine name="pacman" sourcefile="pacman.cpp" cloneof="puckman">
        <description>Pac-Man</description><year>1980</year>
        <manufacturer>Namco</manufacturer><driver emulation="good"/>
      </machine>
    </mame>

Normalized record-set shapes:
    <Machines><Machine><MachineName/><Description/></Machine></Machines>
    <Softwares><Software><SoftwareName/><Description/></Software></Softwares>

Untrusted XML is parsed with defusedxml; output documents are built with ElementTree.
"""

import io
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Tuple, Union

from defusedxml import ElementTree as SafeET
from defusedxml import DefusedXmlException

from mameutility.core.config import ProcessingConfig
from mameutility.core.models import (
    MachineRecord, SoftwareRecord, RecordEntry, RecordSet, RecordSetShape)
from mameutility.errors import ParseError

logger = logging.getLogger(__name__)

Document = Union[bytes, str, Path]

_MACHINE_TAGS = ("machine", "game")


def _load_root(document: Document) -> Tuple[ET.Element, Optional[str]]:
    """
    Parses a document given as raw bytes, XML text or a filesystem path.
    Returns the root element and the source path (for error context).
    """
    source_path = None
    try:
        if isinstance(document, Path):
            source_path = str(document)
            tree = SafeET.parse(source_path)
            return tree.getroot(), source_path
        if isinstance(document, str):
            document = document.encode("utf-8")
        return SafeET.parse(io.BytesIO(document)).getroot(), None
    except ET.ParseError as e:
        raise ParseError(f"Malformed XML: {e}", path=source_path) from e
    except DefusedXmlException as e:
        raise ParseError(f"Rejected unsafe XML construct: {e}", path=source_path) from e
    except OSError as e:
        raise ParseError(f"Cannot read document: {e}", path=source_path) from e


def _child_text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None:
        return None
    return child.text or ""


def _emulation_status(machine: ET.Element) -> str:
    driver = machine.find("driver")
    if driver is None:
        return ""
    return driver.get("emulation") or driver.get("status") or ""


# =============================
# Raw catalog
# =============================

def parse_catalog(document: Document) -> List[MachineRecord]:
    """
    Loads a raw catalog into MachineRecords in document order.
    Items without a `name` attribute are dropped.

    Raises:
        ParseError: malformed XML, or no named machine item under the root.
    """
    root, source_path = _load_root(document)

    machines = [el for el in root.iter() if el.tag in _MACHINE_TAGS]
    records = []
    for machine in machines:
        name = machine.get("name")
        if not name:
            continue
        records.append(MachineRecord(
            name=name,
            description=_child_text(machine, "description") or "",
            manufacturer=_child_text(machine, "manufacturer"),
            year=_child_text(machine, "year"),
            source_file=machine.get("sourcefile"),
            clone_of=machine.get("cloneof"),
            emulation_status=_emulation_status(machine),
        ))

    if not records:
        raise ParseError(
            f"Unexpected catalog shape: <{root.tag}> has no named <machine> items",
            path=source_path)

    logger.debug(f"Parsed {len(records)} machines from {source_path or '<memory>'}")
    return records


def parse_software_list(document: Document) -> List[SoftwareRecord]:
    """
    Loads all <software> items of one software-list catalog.
    Missing descriptions become "No Description"; nameless items are dropped.
    An empty list is a valid result.
    """
    root, _ = _load_root(document)

    softwares = []
    for software in root.iter("software"):
        name = software.get("name")
        if not name:
            continue
        description = _child_text(software, "description")
        softwares.append(SoftwareRecord(
            name=name,
            description=description if description is not None else ProcessingConfig.NO_DESCRIPTION,
        ))
    return softwares


# =============================
# Normalized record-sets
# =============================

def detect_shape(root: ET.Element) -> Optional[RecordSetShape]:
    """Returns the record-set shape if the root holds at least one matching item."""
    for shape in RecordSetShape:
        if root.tag == shape.value and root.find(shape.item_tag) is not None:
            return shape
    return None


def read_record_set(path: Union[str, Path]) -> Tuple[RecordSetShape, RecordSet]:
    """
    Reads a record-set file in either accepted shape, normalized to (name, description).
    Items without a name are dropped; a missing description becomes "".

    Raises:
        ParseError: malformed XML, unreadable file, or neither shape present.
    """
    root, source_path = _load_root(Path(path))
    shape = detect_shape(root)
    if shape is None:
        raise ParseError(
            f"Unexpected record-set shape: <{root.tag}> is neither <Machines> nor <Softwares> "
            f"with at least one item",
            path=source_path)

    entries = []
    for item in root.findall(shape.item_tag):
        name = _child_text(item, shape.name_tag)
        if not name:
            continue
        entries.append(RecordEntry(
            name=name,
            description=_child_text(item, shape.description_tag) or "",
        ))
    return shape, RecordSet(entries)


def build_record_set_tree(records: RecordSet, shape: RecordSetShape = RecordSetShape.MACHINES) -> ET.ElementTree:
    root = ET.Element(shape.value)
    for entry in records:
        item = ET.SubElement(root, shape.item_tag)
        ET.SubElement(item, shape.name_tag).text = entry.name
        ET.SubElement(item, shape.description_tag).text = entry.description
    tree = ET.ElementTree(root)
    ET.indent(tree, space="  ")
    return tree


def write_record_set(
        path: Union[str, Path],
        records: RecordSet,
        shape: RecordSetShape = RecordSetShape.MACHINES
) -> None:
    """
    Writes a record-set file (UTF-8 with XML declaration).
    OSError propagates; callers decide whether a failed write is fatal.
    """
    tree = build_record_set_tree(records, shape)
    tree.write(str(path), encoding="utf-8", xml_declaration=True)
