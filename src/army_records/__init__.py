"""
army-records: schema validation and correction loop for soldier personnel records.

XML submissions are validated field by field; valid batches are upserted into
PostgreSQL, invalid batches are rendered as annotated spreadsheets that can be
corrected and re-submitted.
"""

__version__ = "0.1.0"
