from __future__ import annotations

from typing import Any, Dict, List, TYPE_CHECKING

from .base import Reporter

if TYPE_CHECKING:
    from ..model import Diagnostic


class SilentReporter(Reporter):
    """Prints nothing.

    Diagnostics and summaries are kept on the instance so library callers and
    tests can inspect what would have been reported.
    """

    def __init__(self) -> None:
        super().__init__()
        self.diagnostics: List["Diagnostic"] = []
        self.summaries: Dict[str, Dict[str, Any]] = {}

    def status(self, message: str, **fields: Any) -> None:
        pass

    def error(self, message: str, **fields: Any) -> None:
        pass

    def diagnostic(self, diag: "Diagnostic") -> None:
        self.diagnostics.append(diag)

    def summary(self, kind: str, **fields: Any) -> None:
        self.summaries[kind] = fields
