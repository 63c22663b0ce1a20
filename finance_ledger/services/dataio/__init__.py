"""Import/export package."""

from finance_ledger.services.dataio.csv_export import (
    CSV_HEADERS,
    csv_rows,
    write_transactions_csv,
)
from finance_ledger.services.dataio.state_io import (
    EXPORT_FORMAT_VERSION,
    dump_state,
    export_filename,
    export_json,
    export_state,
    import_state,
)

__all__ = [
    # JSON state
    "EXPORT_FORMAT_VERSION",
    "dump_state",
    "export_filename",
    "export_json",
    "export_state",
    "import_state",
    # CSV
    "CSV_HEADERS",
    "csv_rows",
    "write_transactions_csv",
]
