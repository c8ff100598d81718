"""Log record models, classification and recorded-log loading."""

from .models import (
    BankTrade,
    Icon,
    KnownSteal,
    LogRecord,
    Monopoly,
    Operation,
    PlayerTrade,
    ResourceGain,
    ResourceSpend,
    StartingAllocation,
    UnknownSteal,
)
from .classify import EventClassifier, Matcher, is_monopoly
from .markup import record_from_html, records_from_chat_log
from .source import LogSourceError, load_records

__all__ = [
    "BankTrade",
    "Icon",
    "KnownSteal",
    "LogRecord",
    "Monopoly",
    "Operation",
    "PlayerTrade",
    "ResourceGain",
    "ResourceSpend",
    "StartingAllocation",
    "UnknownSteal",
    "EventClassifier",
    "Matcher",
    "is_monopoly",
    "record_from_html",
    "records_from_chat_log",
    "LogSourceError",
    "load_records",
]
