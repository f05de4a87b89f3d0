"""forge-shell: interactive command shell core for developer tooling.

A persistent session, typed argument conversion, script execution through
an embedded evaluator and a structured error taxonomy, layered the same
way throughout: ``core`` → ``infra`` → ``cli``.
"""

from forge_shell.version import __version__

__all__: list[str] = ["__version__"]
