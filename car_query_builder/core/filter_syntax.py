"""
Typesense filter_by / sort_by grammar.

Parses the expressions produced by the completion model so they can be
checked against the field catalog and normalized before they reach the
search index.

Grammar (as taught in the system prompt):

    expression := or_expr
    or_expr    := and_expr ("||" and_expr)*
    and_expr   := primary ("&&" primary)*
    primary    := "(" expression ")" | condition
    condition  := field ":" [operator] value
    operator   := "!=" | ">=" | "<=" | ">" | "<" | "="
    value      := "[" items "]" | token

Values containing parentheses must be wrapped in backticks.
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from car_query_builder.core.errors import FilterSyntaxError

AND = "&&"
OR = "||"

# Longest first so ">=" is not read as ">" followed by "=".
OPERATORS = ("!=", ">=", "<=", ">", "<", "=")

SORT_DIRECTIONS = ("asc", "desc")

# Operators whose same-field disjunctions have an exact array form.
MATCH_OPERATORS = ("", "=")

# Start of a second condition inside an unescaped value, e.g. "BMW model:X3".
_NEXT_CONDITION = re.compile(r"\s+[A-Za-z_][\w.]*\s*:")


@dataclass
class Condition:
    """A single `field:value` condition."""

    field: str
    operator: str
    value: str

    @property
    def is_array(self) -> bool:
        return self.value.startswith("[") and self.value.endswith("]")

    @property
    def is_range(self) -> bool:
        return self.is_array and ".." in self.value

    @property
    def is_plain_match(self) -> bool:
        """True for `field:value`, `field:=value` and their array forms, but not ranges."""
        return self.operator in MATCH_OPERATORS and not self.is_range

    @property
    def values(self) -> List[str]:
        if self.is_array:
            return split_array_items(self.value[1:-1])
        return [self.value]

    def render(self) -> str:
        return f"{self.field}:{self.operator}{self.value}"


@dataclass
class Expression:
    """Conditions joined by a single boolean operator."""

    operator: str
    operands: List["Node"] = field(default_factory=list)

    def render(self) -> str:
        parts = []
        for operand in self.operands:
            text = operand.render()
            if isinstance(operand, Expression):
                text = f"({text})"
            parts.append(text)
        return f" {self.operator} ".join(parts)


Node = Union[Condition, Expression]


def split_array_items(inner: str) -> List[str]:
    """Split the inside of `[a, b, `c, d`]` on commas outside backticks."""
    items: List[str] = []
    current: List[str] = []
    in_backticks = False
    for char in inner:
        if char == "`":
            in_backticks = not in_backticks
        if char == "," and not in_backticks:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    items.append("".join(current).strip())
    return [item for item in items if item]


class _Tokenizer:
    """Splits a filter expression into parens, boolean operators and conditions."""

    def __init__(self, expression: str):
        self.expression = expression
        self.pos = 0

    def error(self, message: str) -> FilterSyntaxError:
        return FilterSyntaxError(message, self.expression, self.pos)

    def tokens(self) -> List[Union[str, Condition]]:
        text = self.expression
        result: List[Union[str, Condition]] = []
        while self.pos < len(text):
            char = text[self.pos]
            if char.isspace():
                self.pos += 1
            elif char in "()":
                result.append(char)
                self.pos += 1
            elif text.startswith(AND, self.pos) or text.startswith(OR, self.pos):
                result.append(text[self.pos:self.pos + 2])
                self.pos += 2
            else:
                result.append(self._condition())
        return result

    def _condition(self) -> Condition:
        text = self.expression
        start = self.pos
        colon = text.find(":", start)
        if colon == -1:
            raise self.error("Expected ':' after field name")
        name = text[start:colon].strip()
        if not name or any(c.isspace() or c in "()[]`&|" for c in name):
            raise self.error(f"Invalid field name {name!r}")
        self.pos = colon + 1

        operator = ""
        for candidate in OPERATORS:
            if text.startswith(candidate, self.pos):
                operator = candidate
                self.pos += len(candidate)
                break

        while self.pos < len(text) and text[self.pos].isspace():
            self.pos += 1

        if self.pos < len(text) and text[self.pos] == "[":
            value = self._array_value()
        else:
            value = self._token_value()
        if not value:
            raise self.error(f"Missing value for field '{name}'")
        return Condition(field=name, operator=operator, value=value)

    def _array_value(self) -> str:
        text = self.expression
        start = self.pos
        in_backticks = False
        while self.pos < len(text):
            char = text[self.pos]
            if char == "`":
                in_backticks = not in_backticks
            elif char == "]" and not in_backticks:
                self.pos += 1
                inner = text[start + 1:self.pos - 1]
                items = split_array_items(inner)
                if not items:
                    raise self.error("Empty value list")
                for item in items:
                    self._check_escaped(item)
                return text[start:self.pos]
            self.pos += 1
        raise self.error("Unterminated '['" if not in_backticks else "Unterminated backtick")

    def _token_value(self) -> str:
        text = self.expression
        start = self.pos
        in_backticks = False
        while self.pos < len(text):
            char = text[self.pos]
            if char == "`":
                in_backticks = not in_backticks
            elif not in_backticks:
                if char == ")" or text.startswith(AND, self.pos) or text.startswith(OR, self.pos):
                    break
                if char == "(":
                    raise self.error("Values containing parentheses must be wrapped in backticks")
                if char.isspace() and _NEXT_CONDITION.match(text, self.pos):
                    raise self.error("Conditions must be joined with && or ||")
            self.pos += 1
        if in_backticks:
            raise self.error("Unterminated backtick")
        value = text[start:self.pos].strip()
        self._check_escaped(value)
        return value

    def _check_escaped(self, value: str) -> None:
        if value.startswith("`") and value.endswith("`") and len(value) > 1:
            return
        if "(" in value or ")" in value:
            raise self.error("Values containing parentheses must be wrapped in backticks")


class _Parser:
    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = _Tokenizer(expression).tokens()
        self.index = 0

    def error(self, message: str) -> FilterSyntaxError:
        return FilterSyntaxError(f"{message} in {self.expression!r}")

    def peek(self):
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def take(self):
        token = self.peek()
        self.index += 1
        return token

    def parse(self) -> Node:
        if not self.tokens:
            raise self.error("Empty filter expression")
        node = self._or()
        if self.peek() is not None:
            raise self.error(f"Unexpected token {self.peek()!r}")
        return node

    def _or(self) -> Node:
        return self._chain(OR, self._and)

    def _and(self) -> Node:
        return self._chain(AND, self._primary)

    def _chain(self, operator: str, operand) -> Node:
        operands = [operand()]
        while self.peek() == operator:
            self.take()
            operands.append(operand())
        if len(operands) == 1:
            return operands[0]
        return Expression(operator, operands)

    def _primary(self) -> Node:
        token = self.take()
        if isinstance(token, Condition):
            return token
        if token == "(":
            node = self._or()
            if self.take() != ")":
                raise self.error("Missing ')'")
            return node
        if token is None:
            raise self.error("Unexpected end of expression")
        raise self.error(f"Unexpected token {token!r}")


def parse_filter(expression: str) -> Node:
    """Parse a filter_by expression into a tree of conditions."""
    return _Parser(expression).parse()


def render_filter(node: Node) -> str:
    return node.render()


def collapse_same_field_disjunctions(node: Node) -> Node:
    """
    Rewrite `make:BMW || make:Honda` as `make:[BMW,Honda]`.

    Only `:` and `:=` matches are merged, each with its own operator.
    Negations, comparisons and ranges keep their original form because
    merging them would change the result set. Nested groups joined by the
    same operator are flattened into their parent first.
    """
    if isinstance(node, Condition):
        return node

    operands: List[Node] = []
    for child in node.operands:
        collapsed = collapse_same_field_disjunctions(child)
        if isinstance(collapsed, Expression) and collapsed.operator == node.operator:
            operands.extend(collapsed.operands)
        else:
            operands.append(collapsed)
    if node.operator != OR:
        return Expression(node.operator, operands)

    merged: List[Node] = []
    by_key = {}
    for operand in operands:
        if isinstance(operand, Condition) and operand.is_plain_match:
            key = (operand.field, operand.operator)
            existing = by_key.get(key)
            if existing is None:
                by_key[key] = len(merged)
                merged.append(Condition(operand.field, operand.operator, operand.value))
                continue
            target = merged[existing]
            values = target.values
            for value in operand.values:
                if value not in values:
                    values.append(value)
            target.value = "[" + ",".join(values) + "]"
            continue
        merged.append(operand)

    if len(merged) == 1:
        return merged[0]
    return Expression(OR, merged)


def normalize_filter(expression: str) -> str:
    """Parse, collapse same-field disjunctions and render canonically."""
    return render_filter(collapse_same_field_disjunctions(parse_filter(expression)))


def iter_conditions(node: Node):
    if isinstance(node, Condition):
        yield node
        return
    for operand in node.operands:
        yield from iter_conditions(operand)


def filter_fields(expression: str) -> List[str]:
    """Field names referenced by a filter expression, in order of appearance."""
    seen: List[str] = []
    for condition in iter_conditions(parse_filter(expression)):
        if condition.field not in seen:
            seen.append(condition.field)
    return seen


def parse_sort_by(expression: str) -> List[Tuple[str, str]]:
    """Parse `year:desc,msrp:asc` into [("year", "desc"), ("msrp", "asc")]."""
    pairs: List[Tuple[str, str]] = []
    for part in expression.split(","):
        part = part.strip()
        if not part:
            raise FilterSyntaxError(f"Empty sort field in {expression!r}")
        name, sep, direction = part.rpartition(":")
        name = name.strip()
        direction = direction.strip().lower()
        if not sep or not name:
            raise FilterSyntaxError(f"Expected 'field:direction', got {part!r}")
        if direction not in SORT_DIRECTIONS:
            raise FilterSyntaxError(
                f"Sort direction for '{name}' must be one of {SORT_DIRECTIONS}, got {direction!r}"
            )
        pairs.append((name, direction))
    return pairs


def render_sort_by(pairs: List[Tuple[str, str]]) -> str:
    return ",".join(f"{name}:{direction}" for name, direction in pairs)
