"""
XML reader producing the tree form of a soldier batch.
"""

import xml.etree.ElementTree as ET
from typing import Any

from army_records.core.errors import RecordParseError


def _local_name(tag: str) -> str:
    """Strip a "{namespace}" prefix from an element tag."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def element_to_value(element: ET.Element) -> Any:
    """
    Convert an element to plain Python values.

    Leaf elements become their stripped text (None when empty). Elements
    with children become dictionaries keyed by child tag; a tag that
    repeats becomes a list in document order. Attributes are ignored.
    """
    children = list(element)
    if not children:
        text = (element.text or "").strip()
        return text or None

    value: dict[str, Any] = {}
    for child in children:
        key = _local_name(child.tag)
        child_value = element_to_value(child)
        if key not in value:
            value[key] = child_value
        elif isinstance(value[key], list):
            value[key].append(child_value)
        else:
            value[key] = [value[key], child_value]
    return value


class XMLReader:
    """
    Parses XML submissions into tree form.

    The result maps the root tag to its converted content, e.g.
    {"army_records": {"soldier": [{...}, {...}]}}. A batch holding a single
    soldier element parses to a dict rather than a list; the schema
    validator coerces it.
    """

    def parse(self, payload: bytes | str) -> dict[str, Any]:
        """
        Parse an XML document.

        Args:
            payload: Raw document

        Returns:
            Tree form of the document

        Raises:
            RecordParseError: If the document is not well-formed XML
        """
        try:
            root = ET.fromstring(payload)
        except ET.ParseError as e:
            raise RecordParseError("XML", str(e)) from e

        return {_local_name(root.tag): element_to_value(root)}

    def read(self, file_path: str) -> dict[str, Any]:
        """Read and parse an XML file."""
        with open(file_path, "rb") as f:
            return self.parse(f.read())
