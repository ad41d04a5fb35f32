"""
Syntax Engine - PHP validation before generated templates are written.
"""

from blockforge.engines.syntax.php_syntax import (
    LintOutcome,
    SyntaxCheckStrategy,
    PhpBinaryLint,
    TreeSitterPhpParse,
    PhpSyntaxValidator,
    normalize_lint_message,
    is_wrong_binary_message,
)

__all__ = [
    "LintOutcome",
    "SyntaxCheckStrategy",
    "PhpBinaryLint",
    "TreeSitterPhpParse",
    "PhpSyntaxValidator",
    "normalize_lint_message",
    "is_wrong_binary_message",
]
