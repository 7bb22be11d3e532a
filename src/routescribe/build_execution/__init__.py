"""Build execution exports."""

from .build_contracts import BuildContext, BuildOutcome, BuildRequest, MergeOutcome, MergeRequest
from .build_use_case import execute_build, execute_merge

__all__ = [
    "BuildContext",
    "BuildOutcome",
    "BuildRequest",
    "MergeOutcome",
    "MergeRequest",
    "execute_build",
    "execute_merge",
]
