"""Steps that delegate to browser-side script functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from webchain.chain.steps._shared import require_text

if TYPE_CHECKING:
    from webchain.chain.element_chain import ElementChain
    from webchain.scripts import ScriptRunner


class ScriptSteps:
    def invoke_script(
        self: ElementChain,
        runner: ScriptRunner,
        module_name: str,
        function_name: str | None = None,
        *args: Any,
    ) -> ElementChain:
        """Pass the current elements to a script function.

        The elements are inserted as the first argument, ahead of *args*.
        A None result leaves the element set unchanged; anything else
        replaces it.
        """
        require_text(module_name, "module_name")
        if function_name is None:
            descriptor = f"js.{module_name}"
        else:
            descriptor = f"js.{module_name}.{function_name}"

        def _invoke(elements: tuple[Any, ...], browser: Any, token: Any) -> Any:
            result = runner.invoke_function(module_name, function_name, list(elements), *args)
            if result is None:
                return elements
            return result

        return self.add_node(descriptor, _invoke)
