"""AuraCycle cycle prediction core.

Pure, synchronous functions over immutable log snapshots.  Nothing here
does I/O or keeps state between calls.

Modules:
    base            - LogEntry / CycleSettings inputs and date parsing
    episodes        - Period episode reconstruction from daily period logs
    estimator       - Recency-weighted cycle length estimate
    predictor       - Next period forecast and regularity verdict
    calendar_status - Settings-based cycle day and countdown
    log_summary     - Symptom / mood / flow / lifestyle aggregates
    config_loader   - Load/validate/hot-reload cycle_config.yaml
"""

from src.cycles.base import CycleSettings, InvalidInputError, LogEntry
from src.cycles.calendar_status import CycleStatus, cycle_status
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.log_summary import LogSummary, summarize_logs
from src.cycles.predictor import (
    Confidence,
    CyclePrediction,
    CyclePredictor,
    RegularityVerdict,
    classify_regularity,
    predict,
)

__all__ = [
    "LogEntry",
    "CycleSettings",
    "InvalidInputError",
    "CyclePredictor",
    "CyclePrediction",
    "RegularityVerdict",
    "Confidence",
    "predict",
    "classify_regularity",
    "CycleStatus",
    "cycle_status",
    "LogSummary",
    "summarize_logs",
    "CycleConfig",
    "get_cycle_config",
]
