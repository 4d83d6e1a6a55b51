"""bunchmail - consolidate scattered maildirs into one.

This package reads any number of inbox and archive maildirs, removes
duplicate messages by Message-ID and re-files everything into a single
maildir split into Inbox, Sent and Archive folders.
"""

__version__ = "0.1.0"

from bunchmail.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
