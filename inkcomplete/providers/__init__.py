from .base import DictionaryProvider, SuggestionProvider
from .callout_provider import CALLOUT_TYPES, CalloutProvider, CalloutType
from .scanner_provider import FileScannerProvider
from .word_list_provider import WordListProvider

__all__ = [
    "CALLOUT_TYPES",
    "CalloutProvider",
    "CalloutType",
    "DictionaryProvider",
    "FileScannerProvider",
    "SuggestionProvider",
    "WordListProvider",
]
