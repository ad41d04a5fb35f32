"""
Template renderers.

A renderer includes a PHP file with a set of variables in scope and
returns its output.
"""

import json
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping, Optional

from blockforge.config import Settings, get_settings
from blockforge.errors import RenderError
from blockforge.logging_config import get_logger

logger = get_logger(__name__)

# Reads {"file": ..., "variables": {...}} from stdin, extracts the
# variables without clobbering its own, then includes the file.
PHP_BOOTSTRAP = (
    "$__bf = json_decode(stream_get_contents(STDIN), true);"
    "if (!is_array($__bf) || !isset($__bf['file'])) { fwrite(STDERR, 'invalid render payload'); exit(2); }"
    "if (isset($__bf['variables']) && is_array($__bf['variables'])) { extract($__bf['variables'], EXTR_SKIP); }"
    "include $__bf['file'];"
)


class TemplateRenderer(ABC):
    """Renders one PHP file."""

    @abstractmethod
    def render(self, path: Path, variables: Mapping[str, Any]) -> str:
        """Output of `path` with `variables` in scope; raises RenderError."""


class PhpCliRenderer(TemplateRenderer):
    """Renders with `php -r <bootstrap>` in a subprocess."""

    def __init__(self, binary: Optional[str], timeout: float = 10.0):
        self.binary = binary
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PhpCliRenderer":
        settings = settings or get_settings()
        return cls(settings.resolve_php_binary(), timeout=settings.php_render_timeout_seconds)

    def render(self, path: Path, variables: Mapping[str, Any]) -> str:
        label = Path(path).name
        if not self.binary:
            raise RenderError(f"No PHP binary available to render {label}", label=label)

        payload = json.dumps({"file": str(Path(path).resolve()), "variables": dict(variables)}, default=str)
        try:
            result = subprocess.run(
                [self.binary, "-r", PHP_BOOTSTRAP],
                input=payload,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise RenderError(
                f"Rendering {label} timed out after {self.timeout:.1f}s",
                label=label,
            ) from e
        except OSError as e:
            raise RenderError(f"Unable to start PHP to render {label}: {e}", label=label) from e

        if result.returncode != 0:
            stderr = (result.stderr or result.stdout or "").strip()
            raise RenderError(
                f"Rendering {label} failed with exit code {result.returncode}",
                label=label,
                details={"stderr": stderr[:2000]},
            )
        return result.stdout
