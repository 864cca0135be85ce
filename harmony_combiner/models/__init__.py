from .records import COMMON_FIELD_HEADER, FileRecord, Population, UNLABELED
from .catalog import ExportCatalog
from .reconciliation import HeaderReconciliation

__all__ = [
    "COMMON_FIELD_HEADER",
    "FileRecord",
    "Population",
    "UNLABELED",
    "ExportCatalog",
    "HeaderReconciliation",
]
