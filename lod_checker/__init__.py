"""LOD Checker: BIM element Level of Development compliance checks."""

__version__ = "0.1.0"
