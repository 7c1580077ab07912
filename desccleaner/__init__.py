"""Top-level package for desccleaner.

This package turns messy character-description markup into clean,
structure-preserving plain text. `normalize` is the pure entry point;
`ChangeDrivenApplier` keeps a live list of description nodes normalized.
"""

from .text.normalizer import DescriptionNormalizer, normalize
from .watch.applier import ChangeDrivenApplier

__all__ = ["ChangeDrivenApplier", "DescriptionNormalizer", "normalize", "__version__"]

__version__ = "0.5.0"
