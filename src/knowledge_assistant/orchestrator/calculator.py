"""Sandboxed arithmetic evaluation.

A small recursive-descent parser over numbers, + - * / and parentheses.
Nothing is passed to eval().

    expression := term (("+" | "-") term)*
    term       := factor (("*" | "/") factor)*
    factor     := ("+" | "-") factor | NUMBER | "(" expression ")"
"""

import re

from knowledge_assistant.exceptions import CalculationError

MAX_EXPRESSION_LENGTH = 200
MAX_DEPTH = 50

_TOKEN = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|(.))")
_EXPRESSION = re.compile(r"[\d.\s()+\-*/]*\d\s*[+\-*/]\s*[\d.\s()+\-*/]*\d[\d.\s()]*")
_WORD_OPERATORS = (
    (re.compile(r"\bplus\b"), "+"),
    (re.compile(r"\bminus\b"), "-"),
    (re.compile(r"\b(?:times|multiplied by)\b|(?<=\d)\s*x\s*(?=\d)"), "*"),
    (re.compile(r"\b(?:divided by|over)\b"), "/"),
)


def _tokenize(expression: str) -> list[str]:
    tokens = []
    position = 0
    expression = expression.rstrip()
    while position < len(expression):
        match = _TOKEN.match(expression, position)
        if not match:
            break
        number, symbol = match.groups()
        if number is not None:
            tokens.append(number)
        elif symbol in "+-*/()":
            tokens.append(symbol)
        else:
            raise CalculationError(f"Unexpected character '{symbol}'")
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: list[str]):
        self.tokens = tokens
        self.index = 0
        self.depth = 0

    def peek(self) -> str | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise CalculationError("Unexpected end of expression")
        self.index += 1
        return token

    def expression(self) -> float:
        value = self.term()
        while self.peek() in ("+", "-"):
            if self.take() == "+":
                value += self.term()
            else:
                value -= self.term()
        return value

    def term(self) -> float:
        value = self.factor()
        while self.peek() in ("*", "/"):
            operator = self.take()
            right = self.factor()
            if operator == "*":
                value *= right
            elif right == 0:
                raise CalculationError("Division by zero")
            else:
                value /= right
        return value

    def factor(self) -> float:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise CalculationError("Expression nested too deeply")
        try:
            token = self.take()
            if token == "+":
                return self.factor()
            if token == "-":
                return -self.factor()
            if token == "(":
                value = self.expression()
                if self.take() != ")":
                    raise CalculationError("Missing closing parenthesis")
                return value
            if token in "*/)":
                raise CalculationError(f"Unexpected '{token}'")
            return float(token)
        finally:
            self.depth -= 1


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression.

    Raises:
        CalculationError: On syntax errors, division by zero or oversized input
    """
    if not expression or len(expression) > MAX_EXPRESSION_LENGTH:
        raise CalculationError("Expression is empty or too long")
    tokens = _tokenize(expression)
    if not tokens:
        raise CalculationError("Expression is empty")
    parser = _Parser(tokens)
    value = parser.expression()
    if parser.peek() is not None:
        raise CalculationError(f"Unexpected '{parser.peek()}'")
    return value


def extract_expression(query: str) -> str | None:
    """Pull an arithmetic expression out of a query like "what is 2 + 3?".

    Only queries with at least one binary operator between digits qualify.
    """
    text = query.lower()
    for pattern, symbol in _WORD_OPERATORS:
        text = pattern.sub(f" {symbol} ", text)
    match = _EXPRESSION.search(text)
    if not match:
        return None
    expression = " ".join(match.group(0).split())
    # balance parentheses trimmed off by the surrounding sentence
    while expression.count("(") > expression.count(")") and expression.startswith("("):
        expression = expression[1:].strip()
    while expression.count(")") > expression.count("(") and expression.endswith(")"):
        expression = expression[:-1].strip()
    return expression or None


def format_number(value: float) -> str:
    """Format a result without a trailing .0 and with at most 10 decimals."""
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return f"{value:.10f}".rstrip("0").rstrip(".")
