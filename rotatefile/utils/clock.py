"""Time source used for backup timestamps and age cutoffs."""

from datetime import datetime

import pytz


class SystemClock:
    """
    Wall clock in either local time or UTC.

    Times are returned naive so they compare directly with the timestamps
    decoded from backup filenames, which carry no timezone.
    """

    def __init__(self, utc: bool = False):
        self.utc = utc

    def now(self) -> datetime:
        if self.utc:
            return datetime.now(pytz.utc).replace(tzinfo=None)
        return datetime.now()
