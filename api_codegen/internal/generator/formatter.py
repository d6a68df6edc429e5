import logging
from typing import Optional

import black
import isort
from isort.exceptions import ISortError

from ...errors import FormatError

logger = logging.getLogger(__name__)


def format_source(source: str, path: Optional[str] = None) -> str:
    """Форматирование кода: isort (профиль black), затем black"""
    try:
        source = isort.code(source, profile="black")
        return black.format_str(source, mode=black.Mode())
    except (ValueError, ISortError) as e:
        logger.error(f"Failed to format {path or 'source'}: {e}")
        raise FormatError(f"Failed to format generated file: {e}", path=path) from e
