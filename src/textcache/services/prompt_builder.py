"""Maps an operation and its parameters to a backend prompt."""

import string
from dataclasses import dataclass

from textcache.config import PromptTemplates
from textcache.entities import Operation
from textcache.errors import InvalidOperationError, PromptConfigError

# Number of substitution arguments each template is rendered with
_ARITY = {
    "translate": 1,
    "translate_on_context": 2,
    "format": 1,
    "summarize": 1,
}


def resolve_operation(value: Operation | str) -> Operation:
    """Convert an operation name to an Operation.

    Raises:
        InvalidOperationError: If the name is not a known operation
    """
    if isinstance(value, Operation):
        return value
    try:
        return Operation(value)
    except ValueError:
        raise InvalidOperationError(str(value)) from None


def template_arity(template: str) -> int:
    """Count the positional arguments a ``str.format`` template consumes.

    Raises:
        PromptConfigError: For malformed templates or named placeholders
    """
    auto = 0
    highest = -1
    try:
        fields = [name for _, name, _, _ in string.Formatter().parse(template) if name is not None]
    except ValueError as e:
        raise PromptConfigError(f"Malformed prompt template: {e}") from e

    for name in fields:
        if name == "":
            auto += 1
        elif name.isdigit():
            highest = max(highest, int(name))
        else:
            raise PromptConfigError(
                f"Prompt templates take positional placeholders only, got {{{name}}}"
            )

    if auto and highest >= 0:
        raise PromptConfigError("Prompt template mixes automatic and numbered placeholders")
    return auto if auto else highest + 1


@dataclass(frozen=True)
class Prompt:
    """A rendered prompt: system instruction plus ordered user texts."""

    system: str
    texts: tuple[str, ...]


class PromptBuilder:
    """Renders per-operation templates into prompts.

    Templates are checked when the builder is created, so a template with
    the wrong number of placeholders fails at startup rather than on the
    first request that uses it.
    """

    def __init__(self, templates: PromptTemplates) -> None:
        self._templates = templates
        for name, expected in _ARITY.items():
            template = getattr(templates, name)
            actual = template_arity(template)
            if actual != expected:
                raise PromptConfigError(
                    f"Prompt template '{name}' takes {actual} argument(s), expected {expected}",
                    {"template": name},
                )

    def build(self, operation: Operation | str, keyword: str, context: str = "") -> Prompt:
        """Render the prompt for an operation.

        Translate with a non-empty context renders the context-aware
        template with (context, keyword), in that order. Every other case
        renders the operation's single-argument template with keyword.

        Args:
            operation: Operation or operation name
            keyword: Primary input text
            context: Disambiguating text, used by translate only

        Returns:
            The rendered Prompt

        Raises:
            InvalidOperationError: Unknown operation
            PromptConfigError: Template could not be rendered
        """
        operation = resolve_operation(operation)

        if operation is Operation.TRANSLATE and context:
            name, args = "translate_on_context", (context, keyword)
        else:
            name, args = operation.value, (keyword,)

        template = getattr(self._templates, name)
        try:
            rendered = template.format(*args)
        except (IndexError, KeyError, ValueError) as e:
            raise PromptConfigError(
                f"Failed to render prompt template '{name}': {e}", {"template": name}
            ) from e

        return Prompt(system=self._templates.system, texts=(rendered,))
