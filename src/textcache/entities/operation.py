"""Operation request domain entity."""

from dataclasses import dataclass
from enum import Enum


class Operation(str, Enum):
    """Text-processing operations the service can perform."""

    TRANSLATE = "translate"
    FORMAT = "format"
    SUMMARIZE = "summarize"

    @property
    def is_cached(self) -> bool:
        """Only translations are memoized."""
        return self is Operation.TRANSLATE


@dataclass(frozen=True)
class OperationRequest:
    """One inbound text-processing call.

    Attributes:
        operation: The requested operation
        keyword: The primary input text
        context: Disambiguating text, only meaningful for translate
    """

    operation: Operation
    keyword: str
    context: str = ""
