"""Selectors for the stock kernel (read side)."""

from stock_kernel.selectors.efficiency_selector import EfficiencyReport, EfficiencySelector
from stock_kernel.selectors.stock_selector import (
    FinishedGoodsDTO,
    RawMaterialDTO,
    SiloLevelDTO,
    StockSelector,
)

__all__ = [
    "StockSelector",
    "SiloLevelDTO",
    "RawMaterialDTO",
    "FinishedGoodsDTO",
    "EfficiencySelector",
    "EfficiencyReport",
]
