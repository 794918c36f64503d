DATA_DIR = "data"
DB_FILE_NAME = "produce_sales.db"

# schema bookkeeping
TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "2"  # 1 = trays-only Sales table, 2 = multi-commodity

# tables
TABLE_SALES = "Sales"
TABLE_INVENTORY = "Inventory"
TABLE_PENDING_PAYMENTS = "PendingPayments"
TABLE_SETTINGS = "Settings"
TABLE_VEGETABLE_TYPES = "VegetableTypes"

# sale defaults (also used to normalize legacy rows/inputs)
DEFAULT_COMMODITY = "Tomatoes"
DEFAULT_UNIT = "trays"

PAYMENT_METHODS = ("Cash", "Credit", "UPI")
PAYMENT_STATUS_PAID = "paid"
PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUSES = (PAYMENT_STATUS_PAID, PAYMENT_STATUS_PENDING)

# settings keys + defaults
SETTING_DAILY_TARGET = "daily_target"
SETTING_BUSINESS_OPEN = "business_hours_open"
SETTING_BUSINESS_CLOSE = "business_hours_close"

DEFAULT_DAILY_TARGET = 50
DEFAULT_BUSINESS_OPEN = "04:00"
DEFAULT_BUSINESS_CLOSE = "13:00"

# (name, default unit) seeded into VegetableTypes on first run
DEFAULT_COMMODITY_TYPES = (
    ("Tomatoes", "trays"),
    ("Onions", "sacks"),
    ("Potatoes", "sacks"),
    ("Carrots", "kg"),
    ("Cabbage", "kg"),
)
