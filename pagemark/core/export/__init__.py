"""
Exports of the annotation collection.
"""
from .csv_exporter import CSV_COLUMNS, annotation_to_row, default_csv_filename, export_csv, write_csv

__all__ = [
    'CSV_COLUMNS',
    'annotation_to_row',
    'export_csv',
    'write_csv',
    'default_csv_filename',
]
