"""settable — whitelisted object construction from untrusted string maps."""

from settable.domain.approval import user_settable
from settable.domain.binder import Binder
from settable.domain.outcomes import BindingResult, Outcome, OutcomeStatus
from settable.domain.registry import TypeRegistry
from settable.domain.types import Float32, Int32, Int64

__version__ = "0.3.0"

__all__ = [
    "Binder",
    "BindingResult",
    "Float32",
    "Int32",
    "Int64",
    "Outcome",
    "OutcomeStatus",
    "TypeRegistry",
    "__version__",
    "user_settable",
]
