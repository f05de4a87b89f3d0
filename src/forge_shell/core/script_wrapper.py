"""Wrapping a script file into a callable unit that receives positional arguments.

The evaluator has no notion of file-level parameters, so a script run as
``run build.fsh alpha beta`` is rewritten into a uniquely named function
whose prologue copies its parameters into the session-global sequence
:data:`VARARG_NAME`, followed by the unmodified script body and a call
passing each argument as an escaped string literal::

    def build_fsh_7f3a_1(_0, _1) {
    @_vararg = new String[2];
    @_vararg[0] = _0;
    @_vararg[1] = _1;
    <script body>
    };
    @build_fsh_7f3a_1("alpha", "beta");

Dialects whose blocks cannot hold a verbatim body set ``invoke_first``:
the function then only binds the arguments, and the call is placed before
the body, which runs at the top level of the session scope::

    def build_py_7f3a_1(_0, _1):
        global _vararg
        _vararg = [None] * 2
        _vararg[0] = _0
        _vararg[1] = _1
    build_py_7f3a_1("alpha", "beta")
    <script body>

The grammar fragments come from a :class:`ScriptDialect`; every literal
goes through :func:`quote_literal`, the only escaping routine.
"""

from __future__ import annotations

import itertools
import logging
import re
from collections.abc import Sequence

from forge_shell.core.models import ScriptInvocation, SynthesizedUnit
from forge_shell.core.protocols import Evaluator, ScriptDialect
from forge_shell.core.session import Session

logger = logging.getLogger(__name__)

VARARG_NAME = "_vararg"

_ILLEGAL_NAME_CHARS = re.compile(r"[^0-9A-Za-z_]")
_UNSET = object()


def quote_literal(value: str) -> str:
    """Return *value* as a double-quoted string literal.

    Backslashes are escaped before quotes so that an argument ending in a
    backslash cannot swallow the closing quote.
    """
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def sanitize_name(file_name: str) -> str:
    """Turn *file_name* into an identifier (``build.fsh`` → ``build_fsh``)."""
    name = _ILLEGAL_NAME_CHARS.sub("_", file_name) or "script"
    if name[0].isdigit():
        name = f"_{name}"
    return name


# ---------------------------------------------------------------------------
# Dialects
# ---------------------------------------------------------------------------

class FshDialect:
    """Brace-delimited dialect; the script body is inserted verbatim."""

    invoke_first = False

    def declare(self, name: str, parameters: Sequence[str]) -> str:
        return f"def {name}({', '.join(parameters)}) {{\n"

    def bind_arguments(self, sequence: str, parameters: Sequence[str]) -> str:
        lines = [f"@{sequence} = new String[{len(parameters)}];\n"]
        lines.extend(
            f"@{sequence}[{index}] = {parameter};\n"
            for index, parameter in enumerate(parameters)
        )
        return "".join(lines)

    def body(self, content: str) -> str:
        return content

    def invoke(self, name: str, literals: Sequence[str]) -> str:
        return f"\n}}; \n@{name}({', '.join(literals)});\n"


class PythonDialect:
    """Indentation dialect used by the bundled Python evaluator.

    The function only binds the arguments and is called before the body,
    so the script text keeps its top-level scope and its string literals
    byte for byte.
    """

    invoke_first = True
    indent = "    "

    def declare(self, name: str, parameters: Sequence[str]) -> str:
        return f"def {name}({', '.join(parameters)}):\n"

    def bind_arguments(self, sequence: str, parameters: Sequence[str]) -> str:
        lines = [
            f"{self.indent}global {sequence}\n",
            f"{self.indent}{sequence} = [None] * {len(parameters)}\n",
        ]
        lines.extend(
            f"{self.indent}{sequence}[{index}] = {parameter}\n"
            for index, parameter in enumerate(parameters)
        )
        return "".join(lines)

    def body(self, content: str) -> str:
        return content

    def invoke(self, name: str, literals: Sequence[str]) -> str:
        return f"{name}({', '.join(literals)})\n"


# ---------------------------------------------------------------------------
# Wrapper
# ---------------------------------------------------------------------------

class ScriptWrapper:
    """Synthesizes and runs :class:`SynthesizedUnit` values.

    Parameters
    ----------
    session:
        Session whose variables receive (and lose) the synthesized name
        and the argument binding.
    evaluator:
        Engine that executes the composite text; its ``dialect`` decides
        the grammar.
    """

    def __init__(self, session: Session, evaluator: Evaluator) -> None:
        self._session = session
        self._evaluator = evaluator
        self._discriminator = format(id(self), "x")
        self._sequence = itertools.count(1)

    def wrap(self, invocation: ScriptInvocation) -> SynthesizedUnit:
        """Build the composite unit for *invocation* without running it."""
        dialect: ScriptDialect = self._evaluator.dialect
        name = (
            f"{sanitize_name(invocation.path.name)}_"
            f"{self._discriminator}_{next(self._sequence)}"
        )
        parameters = tuple(f"_{index}" for index in range(len(invocation.arguments)))
        prologue = dialect.declare(name, parameters) + dialect.bind_arguments(
            VARARG_NAME, parameters,
        )
        call = dialect.invoke(
            name, [quote_literal(argument) for argument in invocation.arguments],
        )
        if dialect.invoke_first:
            prologue, epilogue = prologue + call, ""
        else:
            epilogue = call
        return SynthesizedUnit(
            name=name,
            parameters=parameters,
            arguments=tuple(invocation.arguments),
            prologue=prologue,
            body=dialect.body(invocation.content),
            epilogue=epilogue,
        )

    def run(self, invocation: ScriptInvocation) -> SynthesizedUnit:
        """Wrap and execute *invocation*.

        The synthesized name is removed from the session afterwards and
        the argument binding goes back to what it was before the run,
        whether execution succeeded or raised.  A script run from inside
        another script therefore hands the outer arguments back.
        """
        unit = self.wrap(invocation)
        variables = self._session.variables
        outer_arguments = variables.get(VARARG_NAME, _UNSET)
        logger.debug("running %s as %s with %d argument(s)", invocation.path, unit.name, len(unit.arguments))
        try:
            self._evaluator.run(unit.text)
        finally:
            variables.pop(unit.name, None)
            if outer_arguments is _UNSET:
                variables.pop(VARARG_NAME, None)
            else:
                variables[VARARG_NAME] = outer_arguments
        return unit
