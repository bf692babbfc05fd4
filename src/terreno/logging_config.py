"""
Configuración de logging con structlog.

Los scripts llaman a configure_logging() una sola vez al arrancar;
los módulos solo hacen ``structlog.get_logger()``.
"""

import logging
from typing import Optional

import structlog
from pydantic import ValidationError

_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configura logging stdlib + structlog.

    Prioridad del nivel: argumento explícito > Settings.log_level > INFO.
    No hace nada si ya se configuró.
    """
    global _configured
    if _configured:
        return

    if level is None:
        from terreno.config import get_settings

        try:
            level = get_settings().log_level
        except ValidationError:
            # Sin credenciales de Supabase no hay Settings; usamos el default
            level = "INFO"

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True
