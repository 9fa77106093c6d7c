"""Column types for 256-bit fixed-point integers.

Prices and sizes are 18-decimal integers that overflow BIGINT, so they are
stored as base-10 text and converted back to ``int`` on load.
"""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class IntText(TypeDecorator):
    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
