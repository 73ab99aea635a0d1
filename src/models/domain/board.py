"""Board catalogue entry"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoardSpec:
    """Immutable board description from YAML"""
    model: str
    valid_gpios: Tuple[int, ...]
