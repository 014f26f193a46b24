"""Name normalization and field extraction."""

from .normalizer import NameNormalizer
from .infobox import InfoboxParser
from .parser import TextFieldExtractor
from .merger import FieldMerger

__all__ = ["NameNormalizer", "InfoboxParser", "TextFieldExtractor", "FieldMerger"]
