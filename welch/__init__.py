from ._config import *

from .analysis import (
    Welch,
    Builder,
    WelchResult,
    ConfigurationError,
    compute_periodogram,
)
from .core import segment_size
from .windows import Window, One, Hann, Hamming, Kaiser, FunctionWindow
