from ...constants import (
    DEFAULT_BUSINESS_CLOSE,
    DEFAULT_BUSINESS_OPEN,
    DEFAULT_COMMODITY_TYPES,
    DEFAULT_DAILY_TARGET,
    SETTING_BUSINESS_CLOSE,
    SETTING_BUSINESS_OPEN,
    SETTING_DAILY_TARGET,
    TABLE_SETTINGS,
    TABLE_VEGETABLE_TYPES,
)

DEFAULT_SETTINGS = (
    (SETTING_DAILY_TARGET, str(DEFAULT_DAILY_TARGET)),
    (SETTING_BUSINESS_OPEN, DEFAULT_BUSINESS_OPEN),
    (SETTING_BUSINESS_CLOSE, DEFAULT_BUSINESS_CLOSE),
)


def seed(conn):
    # INSERT OR IGNORE: a value the user has already changed is never reset
    conn.executemany(
        f"INSERT OR IGNORE INTO {TABLE_SETTINGS}(key, value) VALUES (?, ?)",
        DEFAULT_SETTINGS,
    )
    row = conn.execute(f"SELECT COUNT(*) AS n FROM {TABLE_VEGETABLE_TYPES}").fetchone()
    if row and row[0] == 0:
        conn.executemany(
            f"INSERT INTO {TABLE_VEGETABLE_TYPES}(name, default_unit) VALUES (?, ?)",
            DEFAULT_COMMODITY_TYPES,
        )
    conn.commit()
