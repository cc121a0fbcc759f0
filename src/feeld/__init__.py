"""feeld: declare form fields once; render them as HTML and validate them.

A field is declared with a name, a label, a type token and a rule spec in
either the server (``min_len,5``) or client (``min_length[5]``) dialect.
:class:`FieldRegistry` renders the fields, emits client-side validation
data, and validates submitted values through an injected evaluator.
"""

from feeld.domain.collaborators import Evaluator, Sanitizer
from feeld.domain.errors import FeeldError
from feeld.domain.fields import Field, RenderOptions
from feeld.domain.messages import ErrorFormatter
from feeld.domain.registry import ErrorRecord, FieldRegistry
from feeld.domain.rules import RuleSet, translate_rules
from feeld.domain.types import ConstraintKind, FieldKind

__version__ = "0.1.0"

__all__ = [
    "ConstraintKind",
    "ErrorFormatter",
    "ErrorRecord",
    "Evaluator",
    "FeeldError",
    "Field",
    "FieldKind",
    "FieldRegistry",
    "RenderOptions",
    "RuleSet",
    "Sanitizer",
    "__version__",
    "translate_rules",
]
