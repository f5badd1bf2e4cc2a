"""
XML writer for the tree form of a soldier batch.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from army_records.core.schema.fields import FIELD_KEYS, RECORD_TAG, ROOT_TAG
from army_records.core.schema.mapping import tree_to_candidates


class XMLWriter:
    """
    Serializes a tree batch as an army_records XML document.

    Produces the same shape the XML reader accepts, so a corrected
    spreadsheet can be turned back into an XML submission.
    """

    def to_element(self, tree: dict[str, Any]) -> ET.Element:
        root = ET.Element(ROOT_TAG)
        for candidate in tree_to_candidates(tree) or []:
            soldier = ET.SubElement(root, RECORD_TAG)
            for key in FIELD_KEYS:
                child = ET.SubElement(soldier, key)
                value = candidate.get(key)
                child.text = "" if value is None else str(value)
        return root

    def to_bytes(self, tree: dict[str, Any]) -> bytes:
        """
        Render a tree batch as UTF-8 XML with a declaration.
        """
        root = self.to_element(tree)
        ET.indent(root, space="  ")
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def write(self, tree: dict[str, Any], output_path: str | Path) -> Path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes(tree))
        return path
