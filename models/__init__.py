from .comparison import CompareRequest, ComparisonOut, HighlightOut, SubstitutionOut
from .rehearsal import (
    FrequencyOption,
    RehearsalAttempt,
    RehearsalComplete,
    RehearsalSchedule,
    ScheduleCreate,
)

__all__ = [
    'CompareRequest', 'ComparisonOut', 'HighlightOut', 'SubstitutionOut',
    'FrequencyOption', 'RehearsalAttempt', 'RehearsalComplete', 'RehearsalSchedule', 'ScheduleCreate',
]
