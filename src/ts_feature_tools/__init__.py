"""Analysis-support utilities for a time-series feature-extraction toolkit.

Keyword-based group labeling of a stored time-series dataset, and a
state-space model-order sweep for single series. CLI wrappers live under /scripts.
"""

from .config import ProjectConfig
from .grouping import KeywordGroup, Record, label_groups, partition
from .statespace import SweepResult, fit_order_sweep
