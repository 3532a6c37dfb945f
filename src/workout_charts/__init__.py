from .models import (
    ChartPoint,
    QuantityKind,
    RawStatistic,
    SeriesSnapshot,
    SeriesState,
    StatisticsOption,
    WorkoutRef,
)
from .pipeline import LatestSlot, RefreshPipeline
from .series import SERIES, map_statistics
