"""
PHP syntax validation for generated templates.

Validation is a list of strategies tried in order. Each one reports
whether it could run at all and, if so, the syntax error it found:

1. PhpBinaryLint - `php -l <file>` in a subprocess
2. TreeSitterPhpParse - in-process parse with the tree-sitter PHP grammar

The first strategy that is available decides. When none is available the
template is accepted and a warning is logged.
"""

import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel

from blockforge.config import Settings, get_settings
from blockforge.errors import TemplateSyntaxError
from blockforge.logging_config import get_logger

logger = get_logger(__name__)

UNKNOWN_SYNTAX_ERROR = "Unknown syntax error."

_PARSE_ERROR_PREFIX = re.compile(r"^(?:PHP\s+)?Parse error:\s*", re.IGNORECASE)
_IN_FILE_ON_LINE = re.compile(r" in .* on line (\d+)", re.IGNORECASE)
_IN_FILE_COLON_LINE = re.compile(r" in .*:(\d+)")

# Output of a binary that is not a usable PHP CLI
_WRONG_BINARY_SIGNATURES = ("usage:", "command not found", "no such file or directory")
_NON_CLI_VARIANTS = ("php-fpm", "php-cgi")


class LintOutcome(BaseModel):
    """Result of one validation strategy."""

    available: bool
    error: Optional[str] = None

    @classmethod
    def unavailable(cls) -> "LintOutcome":
        return cls(available=False)

    @classmethod
    def valid(cls) -> "LintOutcome":
        return cls(available=True)

    @classmethod
    def invalid(cls, message: str) -> "LintOutcome":
        return cls(available=True, error=message)


def normalize_lint_message(message: str) -> str:
    """
    Reduce a raw lint diagnostic to one stable sentence.

    "PHP Parse error:  syntax error, unexpected '}' in /tmp/x.php on line 3"
    becomes "syntax error, unexpected '}' on line 3."
    """
    message = (message or "").strip()
    if not message:
        return UNKNOWN_SYNTAX_ERROR

    first_line = message.splitlines()[0].strip()
    first_line = _PARSE_ERROR_PREFIX.sub("", first_line)
    first_line = _IN_FILE_ON_LINE.sub(lambda m: f" on line {m.group(1)}", first_line)
    first_line = _IN_FILE_COLON_LINE.sub(lambda m: f" on line {m.group(1)}", first_line)

    first_line = first_line.rstrip(".").strip()
    if not first_line:
        return UNKNOWN_SYNTAX_ERROR
    return first_line + "."


def is_wrong_binary_message(message: str) -> bool:
    lower = (message or "").lower()
    return any(signature in lower for signature in _WRONG_BINARY_SIGNATURES)


class SyntaxCheckStrategy(ABC):
    """One way of checking PHP syntax."""

    name: str = "strategy"

    @abstractmethod
    def try_validate(self, path: Path, source: str) -> LintOutcome:
        """Check `source` (also written at `path`)."""


class PhpBinaryLint(SyntaxCheckStrategy):
    """Lint with the PHP command line binary."""

    name = "php -l"

    def __init__(self, binary: Optional[str], timeout: float = 10.0, enabled: bool = True):
        self.binary = binary
        self.timeout = timeout
        self.enabled = enabled

    def try_validate(self, path: Path, source: str) -> LintOutcome:
        if not self.enabled or not self.binary:
            return LintOutcome.unavailable()

        binary_name = Path(self.binary).name.lower()
        if any(variant in binary_name for variant in _NON_CLI_VARIANTS):
            logger.debug("Skipping non-CLI PHP binary %s", self.binary)
            return LintOutcome.unavailable()

        try:
            result = subprocess.run(
                [self.binary, "-l", str(path)],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("php -l timed out after %.1fs on %s", self.timeout, path)
            return LintOutcome.unavailable()
        except (FileNotFoundError, PermissionError, OSError) as e:
            logger.debug("php -l could not be started: %s", e)
            return LintOutcome.unavailable()

        if result.returncode == 0:
            return LintOutcome.valid()

        message = (result.stderr or "").strip() or (result.stdout or "").strip()
        if is_wrong_binary_message(message):
            logger.debug("Binary %s is not a PHP CLI: %s", self.binary, message[:200])
            return LintOutcome.unavailable()

        return LintOutcome.invalid(normalize_lint_message(message))


class TreeSitterPhpParse(SyntaxCheckStrategy):
    """
    Parse with the tree-sitter PHP grammar.

    Pure parsing: the template is never executed. The mixed HTML/PHP
    grammar is used, matching how render templates are written.
    """

    name = "tree-sitter"

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._parser = None

    def _get_parser(self):
        if self._parser is None:
            import tree_sitter_php
            from tree_sitter import Language, Parser

            self._parser = Parser(Language(tree_sitter_php.language_php()))
        return self._parser

    def try_validate(self, path: Path, source: str) -> LintOutcome:
        if not self.enabled:
            return LintOutcome.unavailable()

        data = source.encode("utf-8")
        try:
            tree = self._get_parser().parse(data)
            if not tree.root_node.has_error:
                return LintOutcome.valid()
            node = self._first_error_node(tree.root_node)
        except Exception as e:
            logger.debug("tree-sitter PHP parse unavailable: %s", e)
            return LintOutcome.unavailable()

        if node is None:
            return LintOutcome.invalid(UNKNOWN_SYNTAX_ERROR)
        return LintOutcome.invalid(normalize_lint_message(self._describe(node, data)))

    @staticmethod
    def _first_error_node(root):
        """First ERROR or MISSING node in document order."""
        stack = [root]
        while stack:
            node = stack.pop()
            if node.is_error or node.is_missing:
                return node
            children = [c for c in node.children if c.has_error or c.is_missing or c.is_error]
            stack.extend(reversed(children))
        return None

    @staticmethod
    def _describe(node, data: bytes) -> str:
        line = node.start_point[0] + 1
        if node.is_missing:
            return f"syntax error, missing '{node.type}' on line {line}"

        snippet = data[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
        snippet = snippet.strip().splitlines()[0][:40] if snippet.strip() else ""
        if not snippet:
            return f"syntax error, unexpected end of file on line {line}"
        return f"syntax error, unexpected '{snippet}' on line {line}"


class PhpSyntaxValidator:
    """
    Validates generated PHP before it is promoted to its destination.

    Usage:
        validator = PhpSyntaxValidator.from_settings()
        validator.validate(tmp_path, source, 'block "Hero" render.php')
    """

    def __init__(self, strategies: Sequence[SyntaxCheckStrategy]):
        self.strategies: List[SyntaxCheckStrategy] = list(strategies)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PhpSyntaxValidator":
        settings = settings or get_settings()
        return cls([
            PhpBinaryLint(
                binary=settings.resolve_php_binary(),
                timeout=settings.php_lint_timeout_seconds,
                enabled=settings.php_lint_enabled,
            ),
            TreeSitterPhpParse(enabled=settings.php_parser_fallback_enabled),
        ])

    def check(self, path: Path, source: str) -> LintOutcome:
        """First available outcome, or unavailable when no strategy could run."""
        for strategy in self.strategies:
            outcome = strategy.try_validate(Path(path), source)
            if outcome.available:
                return outcome
        return LintOutcome.unavailable()

    def validate(self, path: Path, source: str, label: str) -> None:
        """
        Raise TemplateSyntaxError when the PHP does not parse.

        Passes (with a warning) when no validation strategy is available.
        """
        outcome = self.check(path, source)
        if not outcome.available:
            logger.warning("No PHP syntax validator available; accepting %s unchecked", label)
            return
        if outcome.error is not None:
            raise TemplateSyntaxError(label, outcome.error)
