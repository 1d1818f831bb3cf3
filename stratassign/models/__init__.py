"""Domain models for the stratified randomization tool.

This package contains the data model shared by the CSV adapters, the
validation / assignment services and the CLI.
"""

from .config_models import DEFAULT_MAX_EXAMPLES, RandomizationConfig
from .dataset import Dataset, ParseIssue
from .error_record import ErrorRecord
from .row_data import RowData
from .run_result import (
    IssueCategory,
    RandomizationFailure,
    RandomizationOutcome,
    RandomizationSuccess,
    RunIssue,
    StratumSummary,
)
from .stratum import BLANK, Blank, Present, StratumKey

__all__ = [
    # Configuration
    "DEFAULT_MAX_EXAMPLES",
    "RandomizationConfig",
    # Input data
    "Dataset",
    "ParseIssue",
    "RowData",
    "BLANK",
    "Blank",
    "Present",
    "StratumKey",
    # Outcomes
    "IssueCategory",
    "RunIssue",
    "StratumSummary",
    "RandomizationSuccess",
    "RandomizationFailure",
    "RandomizationOutcome",
    "ErrorRecord",
]
