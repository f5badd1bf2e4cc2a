"""
Batch conversion of soldier record submissions.

Components:
- readers: XML and spreadsheet input
- writers: store, annotated sheet, export and XML output
- holding_areas: directories files move through
- pipeline: orchestration of one submitted file
"""

from .holding_areas import HoldingAreas
from .pipeline import ConversionPipeline, convert_spreadsheet_to_xml

__all__ = [
    "ConversionPipeline",
    "HoldingAreas",
    "convert_spreadsheet_to_xml",
]
