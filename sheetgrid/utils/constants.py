"""
Grid constants shared by the core, the service layer and the HTTP schemas.

Field names follow the host grid's column definitions: the widget reports
edits by `colDef.field`, so the "col_<index>" format is part of the contract.
"""

# Prefix of every row-record field ("col_0", "col_1", ...)
COLUMN_FIELD_PREFIX = 'col_'

# Implicit value of every cell that was never edited (or was cleared)
EMPTY_CELL = ''

# Letters used by spreadsheet column labels
COLUMN_LABEL_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'

# Row count of a freshly opened sheet (virtualized, nothing allocated)
DEFAULT_ROW_COUNT = 100000

# Column count of a freshly opened sheet
DEFAULT_COL_COUNT = 10

# Rows the host grid fetches per block (AG Grid infinite model cacheBlockSize)
DEFAULT_MAX_WINDOW_ROWS = 1000

# Widest sheet allowed; column labels stop at "XFD" like common spreadsheet apps
DEFAULT_MAX_COL_COUNT = 16384

# Largest CSV/XLSX upload accepted by the import endpoint (10MB)
DEFAULT_MAX_IMPORT_BYTES = 10 * 1024 * 1024

# Most cells (rows x columns) a single window request may materialize
DEFAULT_MAX_WINDOW_CELLS = 1000000
