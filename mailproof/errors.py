"""Exceptions raised by the analysis pipeline."""

from __future__ import annotations

from typing import Optional, Union


class AnalysisFatalError(RuntimeError):
    """The run could not produce a result (browser launch or content load failed)."""

    def __init__(self, message: str, run_id: Optional[Union[str, int]] = None) -> None:
        super().__init__(message)
        self.run_id = run_id
