"""logsight: log parsing, statistical analysis and isolation forest anomaly detection."""

from logsight.__version__ import __version__
