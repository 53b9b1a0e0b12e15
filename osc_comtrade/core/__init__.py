from .channels import AnalogChannel, SamplingRate, StatusChannel
from .config import ParserConfig
from .constants import (
    AnalogScalingMode,
    ClockState,
    DataFormat,
    FormatRevision,
    LeapSecondStatus,
    TimeQuality,
)
from .errors import (
    ComtradeError,
    ComtradeWarning,
    IncompleteRecordError,
    InvalidNumericError,
    InvalidTokenError,
    MalformedLineError,
    MissingInputError,
    SemanticError,
    StructuralError,
    UnexpectedEndError,
)
from .record import Comtrade, RecordBuilder
