from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .validation import validate_mapping, validate_operations, dry_run

__version__ = "0.1.0"

__all__ = list(_core_all) + ["validate_mapping", "validate_operations", "dry_run"]
