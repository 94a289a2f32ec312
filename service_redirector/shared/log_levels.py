"""Custom logging levels for the redirector.

Adds a TRACE level below DEBUG for per-request routing detail
(every custom route key tried, every directory entry seen).
"""

import logging

TRACE = 5

logging.addLevelName(TRACE, "TRACE")
