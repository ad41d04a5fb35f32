"""
Attribute parsing for symbol tags.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict


class AttributeParser(ABC):
    """Turns the attribute text of a symbol tag into a name -> value map."""

    @abstractmethod
    def parse(self, attribute_text: str) -> Dict[str, str]:
        ...


class RegexAttributeParser(AttributeParser):
    """
    Quoted `name="value"` / `name='value'` pairs.

    Values are kept verbatim (no entity decoding). Bare attributes and
    unquoted values are ignored; a repeated name keeps the last value.
    """

    PATTERN = re.compile(r"""(\w+)\s*=\s*(["'])(.*?)\2""")

    def parse(self, attribute_text: str) -> Dict[str, str]:
        attributes: Dict[str, str] = {}
        if not attribute_text or not attribute_text.strip():
            return attributes
        for match in self.PATTERN.finditer(attribute_text):
            attributes[match.group(1)] = match.group(3)
        return attributes
