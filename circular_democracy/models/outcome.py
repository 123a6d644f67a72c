"""Terminal outcomes of one orchestrator run.

Exactly one of these is produced per (message, recipient) pair.
"""
from dataclasses import dataclass
from typing import Union
from circular_democracy.models.campaign import ClassificationResult


@dataclass(frozen=True)
class Processed:
    message_id: int
    classification: ClassificationResult
    duplicate_rank: int
    politician_name: str = ""


@dataclass(frozen=True)
class Duplicate:
    pass


@dataclass(frozen=True)
class PoliticianNotFound:
    pass


@dataclass(frozen=True)
class ContentTooShort:
    pass


@dataclass(frozen=True)
class ProcessingError:
    reason: str


IngestionOutcome = Union[Processed, Duplicate, PoliticianNotFound, ContentTooShort, ProcessingError]
