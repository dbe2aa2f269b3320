"""Engine settings resolved from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """Process-wide settings for fieldrules.

    Attributes:
        lookup_timeout: Seconds before a remote uniqueness lookup gives up
        lookup_param: Query parameter carrying the field value
        scope: Ancestor selector that receives state markers
        log_level: Logging level name for the CLI and the lookup service
        lookup_data: YAML file of collections served by the lookup service
    """

    lookup_timeout: float = 10.0
    lookup_param: str = "q"
    scope: str = "fieldset"
    log_level: str = "WARNING"
    lookup_data: Path | None = None

    @classmethod
    def from_env(cls) -> EngineSettings:
        """Create settings from environment variables.

        Variables:
        1. FIELDRULES_LOOKUP_TIMEOUT (positive float seconds, default 10.0;
           unparsable values are logged and ignored)
        2. FIELDRULES_LOOKUP_PARAM (default "q")
        3. FIELDRULES_SCOPE (default "fieldset")
        4. FIELDRULES_LOG_LEVEL (default "WARNING")
        5. FIELDRULES_LOOKUP_DATA (path, optional)
        """
        data = os.environ.get("FIELDRULES_LOOKUP_DATA")
        return cls(
            lookup_timeout=_parse_timeout(os.environ.get("FIELDRULES_LOOKUP_TIMEOUT"), cls.lookup_timeout),
            lookup_param=os.environ.get("FIELDRULES_LOOKUP_PARAM") or cls.lookup_param,
            scope=os.environ.get("FIELDRULES_SCOPE") or cls.scope,
            log_level=(os.environ.get("FIELDRULES_LOG_LEVEL") or cls.log_level).upper(),
            lookup_data=Path(data) if data else None,
        )


def _parse_timeout(raw: str | None, default: float) -> float:
    if not raw:
        return default
    try:
        timeout: float | None = float(raw)
    except ValueError:
        timeout = None
    # Positive and finite; rejects nan as well
    if timeout is None or not 0 < timeout < float("inf"):
        logger.warning("Ignoring FIELDRULES_LOOKUP_TIMEOUT=%r; using %ss", raw, default)
        return default
    return timeout


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for command line and service entry points."""
    level_name = (level or EngineSettings.from_env().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
