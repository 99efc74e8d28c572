"""Application constants."""

# Display formatting
SEPARATOR_LINE = "=" * 60
SEPARATOR_LINE_THIN = "-" * 40

# Processing locks in the dedup store
LOCK_KEY_PREFIX = "announcement:processing:"
CERT_CACHE_KEY_PREFIX = "cert:base64:"
CERT_CACHE_TTL_SECONDS = 24 * 60 * 60

# Favorites status that means the announcement accepts bids
BIDDABLE_STATUS = "Опубликовано (прием заявок)"
BIDDABLE_STATUS_PUBLISHED = "Опубликовано"
BIDDABLE_STATUS_ACCEPTING = "прием заявок"

# Favorites table layout
FAVORITES_TABLE_SELECTOR = "table.table-bordered"
FAVORITES_MIN_CELLS = 10

# Document link resolution
DOCUMENT_EXTENSIONS = ("pdf", "doc", "docx", "xml", "zip", "rar")
FILE_URL_FIELDS = (
    "fileUrl", "file_url", "url", "downloadUrl", "download_url",
    "link", "fileLink", "file_link", "href", "src",
    "data", "file", "document", "result",
)
MAX_SEARCH_DEPTH = 16
DEFAULT_FILE_EXTENSION = ".tmp"

# Parallel batches
MAX_BATCH_TASKS = 9

# Notification status values
NOTIFY_STATUS_SUCCESS = "success"
NOTIFY_STATUS_ERROR = "error"
