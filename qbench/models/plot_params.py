from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class PlotParams:
    values: List[float]
    labels: List[str]
    colors: List[str]
    ylabel: str
    title: str
    output_path: str
    errors: Optional[List[float]] = None
    figsize: Tuple[float, float] = (8, 5)
    rotation: int = 30
    annotate: bool = True
