from enum import Enum


class Classification(Enum):
    BASELINE = "Baseline"
    IMPROVED = "Improved"
    REGRESSED = "Regressed"
    NEUTRAL = "Neutral"
    INCONCLUSIVE = "Inconclusive"


class Statistic(Enum):
    MEAN = "mean"
    MEDIAN = "median"
