"""rigsweep logging configuration.

rigsweep uses the shared InstruktAI logging standard (`instrukt_ai_logging`);
logs go to the canonical location for the "rigsweep" app.
Example log query: `instruktai-python-logs rigsweep --since 10m`.
"""

from __future__ import annotations

import os
from typing import Optional

from instrukt_ai_logging import configure_logging

from rigsweep.constants import LOG_LEVEL_ENV


def setup_logging(level: Optional[str] = None) -> None:
    """Configure rigsweep logging.

    Args:
        level: Optional override for `RIGSWEEP_LOG_LEVEL`.
    """
    if level:
        os.environ[LOG_LEVEL_ENV] = level.upper()

    configure_logging("rigsweep")
