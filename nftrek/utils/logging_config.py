"""
Logging setup for NFTrek.

Application modules log through stdlib `logging`; the root handlers render either
coloured text or one JSON object per line. Pipeline timings go through a
structlog logger that receives an event name and keyword fields only.
"""

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog
from pythonjsonlogger import jsonlogger

JSON_LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'


class StructuredFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with service context."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['service'] = 'nftrek'
        log_record['version'] = os.getenv('APP_VERSION', 'unknown')
        log_record['environment'] = os.getenv('ENVIRONMENT', 'development')

        session_id = getattr(record, 'session_id', None)
        if session_id:
            log_record['session_id'] = session_id


class ColoredFormatter(logging.Formatter):
    """Colored formatter for development console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Colour a copy so other handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{log_color}{record.levelname}{self.RESET}"
        return super().format(record)


def metrics_processors(log_format: str) -> List[Any]:
    """structlog chain for metric events: level filter, names, then a renderer."""
    renderer = structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer()
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        renderer,
    ]


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
) -> None:
    """
    Set up application logging with structured output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ('json' for structured logging, 'text' for human-readable)
        log_file: Optional file path for log output
    """
    structlog.configure(
        processors=metrics_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        console_handler.setFormatter(StructuredFormatter(JSON_LOG_FORMAT))
    else:
        console_handler.setFormatter(ColoredFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
    handlers.append(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter(JSON_LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=handlers,
        format='%(message)s',
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured structlog logger.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


class PipelineMetricsLogger:
    """Structured metrics for mint stages and provider cascades."""

    def __init__(self):
        self.logger = get_logger("nftrek.metrics")

    def log_stage(self, stage: str, duration_ms: float, outcome: str, session_id: Optional[str] = None):
        """Log how long a pipeline stage took and how it ended."""
        self.logger.debug(
            "pipeline_stage",
            stage=stage,
            duration_ms=round(duration_ms, 1),
            outcome=outcome,
            session_id=session_id,
            metric_type="pipeline_performance",
        )

    def log_provider_attempt(self, cascade: str, provider: str, duration_ms: float, success: bool):
        """Log one provider call inside a geocode or storage cascade."""
        self.logger.debug(
            "provider_attempt",
            cascade=cascade,
            provider=provider,
            duration_ms=round(duration_ms, 1),
            success=success,
            metric_type="provider_performance",
        )


# Global metrics logger instance
metrics_logger = PipelineMetricsLogger()
