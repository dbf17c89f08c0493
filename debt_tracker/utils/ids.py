"""Record identifier generation"""

import itertools
import secrets
import threading
import time

_counter = itertools.count()
_lock = threading.Lock()


def generate_id(prefix: str = "GP") -> str:
    """
    Generate a record id: prefix + ms timestamp + monotonic counter + random suffix.

    Ids generated within the same millisecond still differ through the counter.
    """
    with _lock:
        sequence = next(_counter)
    millis = int(time.time() * 1000)
    return prefix + f"{millis:x}{sequence:04x}{secrets.token_hex(2)}".upper()
