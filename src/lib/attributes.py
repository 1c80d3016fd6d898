"""
Attribute resolver for {key=value} lists and YAML props blocks

Turns the raw attribute text carried by FENCE_OPEN / INLINE_DIRECTIVE tokens
into a typed mapping. The resolver is directive-agnostic: every key is kept,
schema checks belong to the TreeValidator.

Value inference for unquoted values:
    {flag}          → True
    {count=3}       → 3
    {ratio=0.5}     → 0.5
    {right=0px}     → "0px"
    {title="a b"}   → "a b"      (quoted values are always strings)
"""

import re
from typing import Any, Dict, Optional

import yaml

from ..models.errors import ErrorKind, ParseError
from ..models.nodes import AttributeValue
from .log import LOG


INT_RE = re.compile(r'^[-+]?\d+$')
FLOAT_RE = re.compile(r'^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$')
KEY_STOP = set(' \t=}"\'')


class DuplicatePropsKey(yaml.constructor.ConstructorError):
    """A props block repeats a mapping key"""

    def __init__(self, key: Any, mark: Any):
        super().__init__(None, None, f"found duplicate key {key!r}", mark)
        self.key = key


class PropsLoader(yaml.SafeLoader):
    """
    SafeLoader that rejects repeated mapping keys

    Plain yaml.safe_load keeps the last value of a repeated key; attributes
    never overwrite each other, so the repeat is raised instead.
    """

    def construct_mapping(self, node: Any, deep: bool = False) -> Any:
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == 'tag:yaml.org,2002:merge':
                continue
            key = self.construct_object(key_node, deep=deep)
            if isinstance(key, str):
                if key in seen:
                    raise DuplicatePropsKey(key, key_node.start_mark)
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def value_infer(text: str) -> AttributeValue:
    """
    Infer the type of an unquoted attribute value

    Args:
        text: Raw unquoted value

    Returns:
        int or float if the value is fully numeric, otherwise the string

    Example:
        >>> value_infer("12"), value_infer("1.5"), value_infer("75%")
        (12, 1.5, '75%')
    """
    if INT_RE.match(text):
        return int(text)
    if FLOAT_RE.match(text):
        return float(text)
    return text


class AttributeResolver:
    """
    Parses attribute lists into {key: value} mappings

    Raises ParseError on duplicate keys (no last-write-wins), malformed
    lists and invalid props blocks.
    """

    def attributes_resolve(self, raw: Optional[str], line: int) -> Dict[str, AttributeValue]:
        """
        Parse a "{...}" attribute list

        Args:
            raw: Attribute list including braces, or None when absent
            line: Source line of the owning directive

        Returns:
            Mapping of attribute keys to inferred values, in source order

        Raises:
            ParseError: DuplicateAttribute, UnterminatedAttributes or
                        InvalidProps (malformed key)

        Example:
            >>> AttributeResolver().attributes_resolve('{icon=x wide title="A B"}', 1)
            {'icon': 'x', 'wide': True, 'title': 'A B'}
        """
        attributes: Dict[str, AttributeValue] = {}
        if not raw:
            return attributes

        body = raw[1:-1] if raw.endswith('}') else raw[1:]
        pos = 0

        while pos < len(body):
            if body[pos].isspace():
                pos += 1
                continue

            key_start = pos
            while pos < len(body) and body[pos] not in KEY_STOP:
                pos += 1
            key = body[key_start:pos]
            if not key:
                raise ParseError.single(
                    ErrorKind.INVALID_PROPS,
                    line,
                    f"Malformed attribute list {raw!r}: expected a key at '{body[pos:]}'",
                )

            value: AttributeValue
            if pos < len(body) and body[pos] == '=':
                pos += 1
                if pos < len(body) and body[pos] in '"\'':
                    value, pos = self.quoted_read(body, pos, line, raw)
                else:
                    value_start = pos
                    while pos < len(body) and not body[pos].isspace():
                        pos += 1
                    value = value_infer(body[value_start:pos])
            else:
                value = True

            self.attribute_add(attributes, key, value, line)

        LOG(f"Resolved {len(attributes)} attribute(s) at line {line}", level=3)
        return attributes

    def quoted_read(self, body: str, pos: int, line: int, raw: str) -> tuple[str, int]:
        """
        Read a quoted value starting at an opening quote

        Returns:
            (unescaped value, position after the closing quote)
        """
        quote = body[pos]
        pos += 1
        chars = []

        while pos < len(body):
            char = body[pos]
            if char == '\\' and pos + 1 < len(body) and body[pos + 1] in (quote, '\\'):
                chars.append(body[pos + 1])
                pos += 2
                continue
            if char == quote:
                return ''.join(chars), pos + 1
            chars.append(char)
            pos += 1

        raise ParseError.single(
            ErrorKind.UNTERMINATED_ATTRIBUTES,
            line,
            f"Unterminated quoted value in attribute list {raw!r}",
        )

    def attribute_add(
        self, attributes: Dict[str, AttributeValue], key: str, value: AttributeValue, line: int
    ) -> None:
        """Insert a key, rejecting duplicates"""
        if key in attributes:
            raise ParseError.single(
                ErrorKind.DUPLICATE_ATTRIBUTE,
                line,
                f"Attribute '{key}' is defined more than once",
            )
        attributes[key] = value

    def props_merge(
        self, attributes: Dict[str, AttributeValue], props: str, line: int
    ) -> Dict[str, AttributeValue]:
        """
        Merge a YAML props block into already-resolved attributes

        Args:
            attributes: Attributes from the brace list
            props: Raw YAML text between the '---' delimiters
            line: Source line of the props block

        Returns:
            New mapping with the props appended

        Raises:
            ParseError: InvalidProps for malformed YAML or non-scalar values,
                        DuplicateAttribute for keys already present or
                        repeated within the block

        Example:
            props "cta: Get started\\nsecondary: false" →
                {"cta": "Get started", "secondary": False}
        """
        try:
            loaded: Any = yaml.load(props, Loader=PropsLoader)
        except DuplicatePropsKey as e:
            raise ParseError.single(
                ErrorKind.DUPLICATE_ATTRIBUTE,
                line,
                f"Attribute '{e.key}' is defined more than once in the props block",
            )
        except yaml.YAMLError as e:
            raise ParseError.single(
                ErrorKind.INVALID_PROPS, line, f"Props block is not valid YAML: {e}"
            )

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ParseError.single(
                ErrorKind.INVALID_PROPS, line, "Props block must be a YAML mapping"
            )

        merged = dict(attributes)
        for key, value in loaded.items():
            if not isinstance(key, str):
                raise ParseError.single(
                    ErrorKind.INVALID_PROPS, line, f"Props key {key!r} is not a string"
                )
            if not isinstance(value, (str, int, float, bool)):
                raise ParseError.single(
                    ErrorKind.INVALID_PROPS,
                    line,
                    f"Props value for '{key}' must be a string, number or boolean",
                )
            self.attribute_add(merged, key, value, line)

        return merged
