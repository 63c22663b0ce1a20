"""Services package."""

from finance_ledger.services.dataio import (
    csv_rows,
    dump_state,
    export_json,
    export_state,
    import_state,
    write_transactions_csv,
)
from finance_ledger.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryStateStorage,
    JsonFileStateStorage,
    StateStorageInterface,
    StorageError,
)

__all__ = [
    # Import/export
    "csv_rows",
    "dump_state",
    "export_json",
    "export_state",
    "import_state",
    "write_transactions_csv",
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "StateStorageInterface",
    "StorageError",
]
