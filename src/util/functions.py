import random
import string
import time
from datetime import datetime, timedelta, timezone
from typing import Any

MASK_PREFIX_LENGTH = 4
MASK_SUFFIX_LENGTH = 4
NO_DATE = "N/A"
INVALID_DATE = "Invalid Date"

__ID_ALPHABET = string.ascii_lowercase + string.digits


def mask_secret(secret: str, prefix: int = MASK_PREFIX_LENGTH, suffix: int = MASK_SUFFIX_LENGTH) -> str:
    # short secrets only keep the prefix
    if len(secret) <= prefix + suffix:
        return f"{secret[:prefix]}..."
    return f"{secret[:prefix]}...{secret[-suffix:]}"


def format_epoch_ms_date(timestamp: Any) -> str:
    if timestamp is None:
        return NO_DATE
    try:
        moment = datetime.fromtimestamp(float(timestamp) / 1000, tz = timezone.utc)
        return moment.strftime("%Y-%m-%d")
    except (TypeError, ValueError, OverflowError, OSError):
        return INVALID_DATE


def display_time(moment: datetime, offset_hours: int) -> str:
    shifted = moment.astimezone(timezone(timedelta(hours = offset_hours)))
    return shifted.strftime("%Y-%m-%d %H:%M:%S")


def generate_key_id() -> str:
    suffix = "".join(random.choices(__ID_ALPHABET, k = 7))
    return f"key-{int(time.time() * 1000)}-{suffix}"
