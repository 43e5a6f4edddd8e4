"""Candidate sources - adapters that hand CandidateRecord batches to the pipeline."""

from reelcal.application.sources.export_source import (
    LetterboxdExportSource,
    construct_review_link,
)
from reelcal.application.sources.import_source import CandidateSource, LiveCandidateSource

__all__ = [
    "CandidateSource",
    "LetterboxdExportSource",
    "LiveCandidateSource",
    "construct_review_link",
]
