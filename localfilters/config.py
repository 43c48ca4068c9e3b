"""
CheckConfig: tunable parameters of the cross-check harness in one dataclass.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .region import VARIANTS

DEFAULT_VARIANT = "base"

OPERATORS: Tuple[str, ...] = (
    "erode",
    "dilate",
    "localextrema",
    "localmean",
    "convolve",
    "opening",
    "closing",
    "top_hat",
    "bottom_hat",
)


@dataclass
class CheckConfig:
    # ------------------------------------------------------------------ #
    # What to compare
    # ------------------------------------------------------------------ #
    variants: Tuple[str, ...] = VARIANTS     # region strategies to run
    operators: Tuple[str, ...] = OPERATORS   # operators to run

    # ------------------------------------------------------------------ #
    # Tolerances for floating sums (localmean, convolve)
    # Min/max based operators must match exactly.
    # ------------------------------------------------------------------ #
    rtol: float = 1e-10
    atol: float = 1e-12

    # ------------------------------------------------------------------ #
    # Timing
    # ------------------------------------------------------------------ #
    repeat: int = 1   # best-of-N wall time per implementation

    def __post_init__(self):
        self.variants = tuple(self.variants)
        self.operators = tuple(self.operators)
        if not self.variants:
            raise ValueError("variants must not be empty")
        for v in self.variants:
            if v not in VARIANTS:
                raise ValueError(f"variants must be among {list(VARIANTS)}, got {v!r}")
        if not self.operators:
            raise ValueError("operators must not be empty")
        for op in self.operators:
            if op not in OPERATORS:
                raise ValueError(f"operators must be among {list(OPERATORS)}, got {op!r}")
        if self.rtol < 0 or self.atol < 0:
            raise ValueError("rtol and atol must be >= 0")
        if self.repeat < 1:
            raise ValueError("repeat must be >= 1")
