"""Domain layer for envelopes application."""

__all__ = [
    "BudgetService",
    "CSVImportService",
    "SummaryService",
    "CsvUploadService",
]


# Import services lazily: the store layer imports domain entities
def __getattr__(name):
    if name == "BudgetService":
        from envelopes.domain.budget import BudgetService
        return BudgetService
    if name == "CSVImportService":
        from envelopes.domain.csv_import import CSVImportService
        return CSVImportService
    if name == "SummaryService":
        from envelopes.domain.summary import SummaryService
        return SummaryService
    if name == "CsvUploadService":
        from envelopes.domain.uploads import CsvUploadService
        return CsvUploadService
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
