"""Prompt template selection.

The renderer only chooses between the two session templates; expanding
variables and colour directives is the :class:`PromptExpander`'s job.
Nothing is cached; the prompt is rebuilt on every loop iteration.
"""

from __future__ import annotations

from forge_shell.core.protocols import PromptExpander
from forge_shell.core.session import Session


class PromptRenderer:
    """Selects the bound-to-project or no-project template and expands it."""

    def __init__(self, expander: PromptExpander) -> None:
        self._expander: PromptExpander = expander

    @staticmethod
    def select_template(session: Session) -> str:
        if session.project is not None:
            return session.config.prompt
        return session.config.prompt_no_project

    def render(self, session: Session) -> str:
        return self._expander.expand(self.select_template(session), session)
