"""
Analysis of ICU-style translation messages.

Only the subset the localization generator supports is understood: simple
``{name}`` arguments, ``{var, plural, ...}`` and ``{var, select, ...}``
expressions. Any other formatted argument (``{when, date, short}``) is kept
as an opaque node and contributes no placeholder.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from translocale.models import (
    AnalyzedMessage,
    MessageKind,
    Placeholder,
    PlaceholderKind,
    RepairResult,
)

logger = logging.getLogger(__name__)

PLURAL_TOKEN = 'plural,'
SELECT_TOKEN = 'select,'
DEFAULT_SELECTOR = 'other'
SELECT_DEFAULT_TEXT = 'Default'
PLURAL_EXAMPLE = '42'
PLURAL_FORMAT = 'compact'

# Used only when the message cannot be parsed.
_LENIENT_ARGUMENT = re.compile(r'\{([^{},]+)\}')
_LENIENT_CONTROL = re.compile(r'\{\s*([^{},]+?)\s*,\s*(plural|select)\s*,')


class MessageSyntaxError(ValueError):
    """Raised by the parser for unbalanced braces and malformed expressions."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}")
        self.position = position


@dataclass
class Argument:
    name: str
    start: int
    end: int

    @property
    def is_empty(self) -> bool:
        """``{}`` has no content; ``{ }`` is an argument with an empty name."""
        return self.end - self.start <= 2


@dataclass
class FormattedArgument:
    """An argument with a format type other than plural/select."""
    source: str
    start: int
    end: int


@dataclass
class ChoiceClause:
    selector: str
    body: List['Node']


@dataclass
class ChoiceExpression:
    variable: str
    kind: str
    start: int
    # Index of the closing brace of the whole expression.
    close: int
    clauses: List[ChoiceClause] = field(default_factory=list)

    @property
    def has_default(self) -> bool:
        return any(clause.selector == DEFAULT_SELECTOR for clause in self.clauses)


Node = Union[Argument, FormattedArgument, ChoiceExpression]


class _MessageParser:
    """Recursive descent parser; literal text is skipped, not materialized."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> List[Node]:
        return self._parse_body(top_level=True)

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _parse_body(self, top_level: bool) -> List[Node]:
        nodes: List[Node] = []
        while not self._at_end():
            char = self.text[self.pos]
            if char == '{':
                nodes.append(self._parse_argument())
            elif char == '}':
                if top_level:
                    raise MessageSyntaxError("unmatched '}'", self.pos)
                return nodes
            else:
                self.pos += 1
        if not top_level:
            raise MessageSyntaxError("unterminated clause", self.pos)
        return nodes

    def _read_until(self, stops: str) -> str:
        begin = self.pos
        while not self._at_end() and self.text[self.pos] not in stops:
            if self.text[self.pos] == '{':
                raise MessageSyntaxError("unexpected '{' inside argument", self.pos)
            self.pos += 1
        if self._at_end():
            raise MessageSyntaxError("unterminated argument", begin)
        return self.text[begin:self.pos]

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def _parse_argument(self) -> Node:
        start = self.pos
        self.pos += 1
        name = self._read_until(',}')
        if self.text[self.pos] == '}':
            self.pos += 1
            return Argument(name.strip(), start, self.pos)

        self.pos += 1
        arg_type = self._read_until(',}').strip()
        if arg_type in ('plural', 'select') and self.text[self.pos] == ',':
            self.pos += 1
            return self._parse_choice(name.strip(), arg_type, start)

        self._skip_to_matching_brace()
        return FormattedArgument(self.text[start:self.pos], start, self.pos)

    def _skip_offset_value(self) -> None:
        self._skip_whitespace()
        begin = self.pos
        while not self._at_end() and self.text[self.pos].isdigit():
            self.pos += 1
        if self.pos == begin:
            raise MessageSyntaxError("missing plural offset value", self.pos)

    def _skip_to_matching_brace(self) -> None:
        depth = 1
        begin = self.pos
        while not self._at_end():
            char = self.text[self.pos]
            self.pos += 1
            if char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return
        raise MessageSyntaxError("unterminated argument", begin)

    def _parse_choice(self, variable: str, kind: str, start: int) -> ChoiceExpression:
        expression = ChoiceExpression(variable=variable, kind=kind, start=start, close=-1)
        while True:
            self._skip_whitespace()
            if self._at_end():
                raise MessageSyntaxError(f"unterminated {kind} expression", start)
            if self.text[self.pos] == '}':
                expression.close = self.pos
                self.pos += 1
                return expression

            selector_start = self.pos
            while (not self._at_end() and not self.text[self.pos].isspace()
                   and self.text[self.pos] not in '{}'):
                self.pos += 1
            selector = self.text[selector_start:self.pos]
            if not selector:
                raise MessageSyntaxError(f"missing selector in {kind} expression", self.pos)
            if kind == 'plural' and selector.startswith('offset:'):
                if selector == 'offset:':
                    self._skip_offset_value()
                continue

            self._skip_whitespace()
            if self._at_end() or self.text[self.pos] != '{':
                raise MessageSyntaxError(f"expected '{{' after selector '{selector}'", self.pos)
            self.pos += 1
            body = self._parse_body(top_level=False)
            self.pos += 1
            expression.clauses.append(ChoiceClause(selector, body))


def parse_message(message: str) -> List[Node]:
    """
    Parse a message into its top-level argument nodes.

    Raises:
        MessageSyntaxError: If braces are unbalanced or an expression is malformed.
    """
    return _MessageParser(message).parse()


def classify_message(message: str) -> MessageKind:
    """The first matching construct wins: plural, then select, then simple."""
    if PLURAL_TOKEN in message:
        return MessageKind.PLURAL
    if SELECT_TOKEN in message:
        return MessageKind.SELECT
    return MessageKind.SIMPLE


def iter_nodes(nodes: List[Node]) -> Iterator[Node]:
    """Yield every node in document order, descending into choice clauses."""
    for node in nodes:
        yield node
        if isinstance(node, ChoiceExpression):
            for clause in node.clauses:
                yield from iter_nodes(clause.body)


def _find_control_expression(nodes: List[Node], kind: str) -> Optional[ChoiceExpression]:
    for node in iter_nodes(nodes):
        if isinstance(node, ChoiceExpression) and node.kind == kind:
            return node
    return None


def _control_placeholder(variable: str, message_kind: MessageKind) -> Placeholder:
    if message_kind is MessageKind.PLURAL:
        return Placeholder(
            name=variable,
            kind=PlaceholderKind.INTEGER,
            example=PLURAL_EXAMPLE,
            format=PLURAL_FORMAT,
        )
    return Placeholder(name=variable, kind=PlaceholderKind.TEXT, example=variable)


def _text_placeholder(name: str) -> Placeholder:
    return Placeholder(name=name, kind=PlaceholderKind.TEXT, example=name)


def _default_clause(expression: ChoiceExpression) -> str:
    if expression.kind == 'plural':
        return f'{DEFAULT_SELECTOR}{{{expression.variable}}}'
    return f'{DEFAULT_SELECTOR}{{{SELECT_DEFAULT_TEXT}}}'


def add_missing_default_clauses(message: str, nodes: List[Node]) -> Tuple[str, List[str]]:
    """
    Add an ``other`` clause to every plural/select expression lacking one.

    Existing clauses are kept verbatim and in order; the new clause goes
    right before the expression's closing brace.

    Returns:
        The updated message and the control variables that were repaired.
    """
    missing = [
        node for node in iter_nodes(nodes)
        if isinstance(node, ChoiceExpression) and not node.has_default
    ]
    repaired_variables = [expression.variable for expression in missing]

    # Splice from the end so earlier offsets stay valid.
    for expression in sorted(missing, key=lambda e: e.close, reverse=True):
        head = message[:expression.close].rstrip()
        message = f'{head} {_default_clause(expression)}{message[expression.close:]}'
    return message, repaired_variables


def _scan_leniently(message: str, message_kind: MessageKind, placeholders: List[Placeholder]) -> None:
    """Regex fallback for messages the parser rejects."""
    control_name = None
    if message_kind is not MessageKind.SIMPLE:
        control_match = _LENIENT_CONTROL.search(message)
        if control_match and control_match.group(2) == message_kind.value:
            control_name = control_match.group(1)
            placeholders.append(_control_placeholder(control_name, message_kind))

    seen = {placeholder.name for placeholder in placeholders}
    for match in _LENIENT_ARGUMENT.finditer(message):
        name = match.group(1).strip()
        if message_kind is MessageKind.SIMPLE:
            placeholders.append(_text_placeholder(name))
        elif name != control_name and name not in seen:
            seen.add(name)
            placeholders.append(_text_placeholder(name))


def _analyze_choice_message(
    message: str,
    nodes: List[Node],
    message_kind: MessageKind,
    placeholders: List[Placeholder],
) -> AnalyzedMessage:
    control = _find_control_expression(nodes, message_kind.value)
    if control is None:
        reason = f"no {message_kind.value} expression found"
        logger.warning("Could not repair message %r: %s", message, reason)
        repair = RepairResult.unrepairable(reason)
        control_name = None
    else:
        control_name = control.variable
        placeholders.append(_control_placeholder(control_name, message_kind))

    seen = {control_name}
    for node in iter_nodes(nodes):
        if isinstance(node, Argument) and not node.is_empty and node.name not in seen:
            seen.add(node.name)
            placeholders.append(_text_placeholder(node.name))

    normalized = message
    if control is not None:
        normalized, repaired_variables = add_missing_default_clauses(message, nodes)
        if repaired_variables:
            repair = RepairResult.repaired(
                f"added missing '{DEFAULT_SELECTOR}' clause for: {', '.join(repaired_variables)}"
            )
            logger.debug("Repaired message %r -> %r", message, normalized)
        else:
            repair = RepairResult.unchanged()

    return AnalyzedMessage(normalized, tuple(placeholders), message_kind, repair)


def analyze_message(message: str) -> AnalyzedMessage:
    """
    Classify a message, extract its placeholders and repair a missing default case.

    Never raises. When the message can't be parsed or analysis fails, the
    original text is returned with whatever placeholders were found, the
    repair status is ``UNREPAIRABLE`` and a warning is logged.

    Args:
        message: The raw translation text.

    Returns:
        AnalyzedMessage: Normalized text, placeholders in order of appearance,
        the message kind and the repair outcome.
    """
    message_kind = classify_message(message)
    placeholders: List[Placeholder] = []
    try:
        try:
            nodes = parse_message(message)
        except MessageSyntaxError as e:
            logger.warning("Malformed message %r: %s. Keeping it unchanged.", message, e)
            _scan_leniently(message, message_kind, placeholders)
            return AnalyzedMessage(
                message, tuple(placeholders), message_kind, RepairResult.unrepairable(str(e))
            )

        if message_kind is MessageKind.SIMPLE:
            # Simple messages keep duplicates; the bundle metadata collapses them.
            placeholders.extend(
                _text_placeholder(node.name) for node in iter_nodes(nodes)
                if isinstance(node, Argument) and not node.is_empty
            )
            return AnalyzedMessage(message, tuple(placeholders), message_kind, RepairResult.unchanged())

        return _analyze_choice_message(message, nodes, message_kind, placeholders)
    except Exception as e:
        logger.warning("Error analyzing message %r: %s", message, e)
        return AnalyzedMessage(
            message, tuple(placeholders), message_kind, RepairResult.unrepairable(str(e))
        )
