"""Script-runner collaborator.

Element chains can hand their current element set to a JavaScript function
running in the page. Loading script modules into the page is the host's
job; the runner here only calls functions on modules that are already
registered under ``window.webchainModules``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from webchain.errors import ScriptError

if TYPE_CHECKING:
    from webchain.browser import Browser

logger = logging.getLogger(__name__)

__all__ = ["ScriptRunner", "SeleniumScriptRunner", "MODULE_REGISTRY"]

# Global object in the page holding loaded modules: {name: {exports: {...}}}.
MODULE_REGISTRY = "webchainModules"

_NO_MODULE = "__webchainNOMOD"
_NO_FUNCTION = "__webchainNOFUNC"


@runtime_checkable
class ScriptRunner(Protocol):
    """Protocol for invoking named functions of browser-side modules."""

    def invoke_function(
        self,
        module_name: str,
        function_name: str | None,
        *args: Any,
    ) -> Any:
        """Invoke *function_name* of *module_name* and return its result.

        A *function_name* of None invokes the module's default export.

        Raises:
            ScriptError: If the module or function is not available.
        """
        ...


class SeleniumScriptRunner:
    """ScriptRunner that executes through the browser's Selenium driver."""

    def __init__(self, browser: Browser) -> None:
        self._browser = browser

    def invoke_function(
        self,
        module_name: str,
        function_name: str | None,
        *args: Any,
    ) -> Any:
        if function_name is None:
            logger.debug("[WEBCHAIN_SCRIPT] invoking module %s", module_name)
        else:
            logger.debug("[WEBCHAIN_SCRIPT] invoking %s.%s", module_name, function_name)

        script = _build_invocation(module_name, function_name)
        try:
            result = self._browser.driver.execute_script(script, *args)
        except Exception as exc:
            raise ScriptError(
                f"Error invoking script {_qualified(module_name, function_name)}: {exc}"
            ) from exc

        if result == _NO_MODULE:
            raise ScriptError(f"Script module '{module_name}' is not loaded in the page.")
        if result == _NO_FUNCTION:
            if function_name is None:
                raise ScriptError(f"Script module '{module_name}' has no default function.")
            raise ScriptError(
                f"Function '{function_name}' was not found in script module '{module_name}'."
            )
        return result


def _qualified(module_name: str, function_name: str | None) -> str:
    return module_name if function_name is None else f"{module_name}.{function_name}"


def _build_invocation(module_name: str, function_name: str | None) -> str:
    """Return the JS body that looks up and calls the target function.

    Markers are returned instead of throwing so that a missing module or
    function can be told apart from an error raised by the function itself.
    """
    target = "m.exports.default" if function_name is None else f"m.exports[{function_name!r}]"
    return (
        f"var r = window.{MODULE_REGISTRY}, m = r && r[{module_name!r}];"
        f"if (!m) {{ return '{_NO_MODULE}'; }}"
        f"var f = {target};"
        f"if (!(f instanceof Function)) {{ return '{_NO_FUNCTION}'; }}"
        "return f.apply(null, Array.prototype.slice.call(arguments));"
    )
