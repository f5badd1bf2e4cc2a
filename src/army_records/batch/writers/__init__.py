"""
Batch output writers.
"""

from .annotated_sheet_writer import AnnotatedSheetWriter, annotated_sheet_name
from .export_writer import SoldierExportWriter
from .warehouse_writer import BatchWarehouseWriter, BatchWriteResult
from .xml_writer import XMLWriter

__all__ = [
    "AnnotatedSheetWriter",
    "BatchWarehouseWriter",
    "BatchWriteResult",
    "SoldierExportWriter",
    "XMLWriter",
    "annotated_sheet_name",
]
