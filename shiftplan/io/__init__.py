"""I/O utilities for CSV import/export."""

from .export_csv import export_assignments_csv, export_matrix_csv, matrix_to_dataframe
from .import_csv import import_profiles_csv, import_templates_csv

__all__ = [
    "import_profiles_csv",
    "import_templates_csv",
    "export_assignments_csv",
    "export_matrix_csv",
    "matrix_to_dataframe",
]
