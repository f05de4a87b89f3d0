"""The interactive shell: startup, the input loop and shutdown.

:class:`Shell` owns the session and wires its collaborators explicitly;
:meth:`Shell.create` builds the production set (prompt_toolkit reader,
history file, bundled Python evaluator).

Input loop
----------
Each iteration renders the prompt and blocks on one line of input:

* end of input (Ctrl+D) arms exit and prints a hint; a second end of input
  in a row requests exit.  Any line read in between disarms it.
* Ctrl+C during the read counts as an empty line.
* blank lines are ignored.  Anything else is appended to history *before*
  it runs, then executed; failures are reported and the loop carries on.

The loop checks ``session.exit_requested`` only between iterations, so an
``exit`` command or :meth:`Shell.request_exit` finishes the current cycle
first.
"""

from __future__ import annotations

import logging
import platform
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from forge_shell.cli.builtins import install_builtins
from forge_shell.cli.console import console, err_console
from forge_shell.cli.prompt_expander import RichPromptExpander
from forge_shell.cli.prompts import Prompter
from forge_shell.core.commands import CommandTable
from forge_shell.core.conversion import ConversionRegistry, install_resource_handlers
from forge_shell.core.converters import install_scalar_handlers
from forge_shell.core.error_translator import ErrorReport, ErrorTranslator
from forge_shell.core.models import Resource, ScriptInvocation
from forge_shell.core.prompt_renderer import PromptRenderer
from forge_shell.core.protocols import Evaluator, LineReader, PromptExpander
from forge_shell.core.script_wrapper import ScriptWrapper
from forge_shell.core.session import (
    PROP_CONFIG_DIR,
    PROP_NO_MOTD,
    PROP_OS_NAME,
    PROP_VERBOSE,
    Session,
)
from forge_shell.exceptions import ConfigError, HistoryError, ShellExecutionError
from forge_shell.infra.config_store import DEFAULT_CONFIG_DIR, ConfigStore
from forge_shell.infra.filesystem import GlobPathspecResolver, LocalResourceFactory, context_directory
from forge_shell.infra.history_store import HistoryStore
from forge_shell.infra.project import locate_project
from forge_shell.infra.python_evaluator import PythonEvaluator

logger = logging.getLogger(__name__)

EOF_HINT = '(Press CTRL-D again or type "exit" to quit.)'
EXIT_MARKER = "exit"


class ShellEvent(Enum):
    STARTUP = "startup"
    POST_STARTUP = "post-startup"
    PRE_SHUTDOWN = "pre-shutdown"
    SHUTDOWN = "shutdown"


Listener = Callable[["Shell"], None]


def default_registry(session: Session) -> ConversionRegistry:
    """Return a registry with the scalar and local resource handlers."""
    registry = ConversionRegistry()
    install_scalar_handlers(registry)
    install_resource_handlers(registry, session, GlobPathspecResolver())
    return registry


class Shell:
    """An interactive session bound to one terminal.

    Parameters
    ----------
    session:
        The session state this shell drives.
    reader:
        Blocking line input (a scripted fake in tests).
    history:
        Persistent command history.
    config_store:
        Locates the config script executed at startup.
    commands:
        Command table; defaults to the built-in commands.
    registry:
        Conversion registry; defaults to :func:`default_registry`.
    evaluator:
        Script engine; defaults to the bundled :class:`PythonEvaluator`.
    expander:
        Prompt template expander; defaults to :class:`RichPromptExpander`.
    """

    def __init__(
        self,
        session: Session,
        reader: LineReader,
        *,
        history: HistoryStore,
        config_store: ConfigStore,
        commands: CommandTable | None = None,
        registry: ConversionRegistry | None = None,
        evaluator: Evaluator | None = None,
        expander: PromptExpander | None = None,
    ) -> None:
        self.session = session
        self.reader = reader
        self.history = history
        self.config_store = config_store
        self.commands = commands if commands is not None else install_builtins(CommandTable())
        self.registry = registry or default_registry(session)
        self.evaluator: Evaluator = evaluator or PythonEvaluator(
            session, self.commands, self.registry, context=self,
        )
        self.renderer = PromptRenderer(expander or RichPromptExpander())
        self.translator = ErrorTranslator()
        self.wrapper = ScriptWrapper(session, self.evaluator)
        self.resource_factory = LocalResourceFactory()
        self.prompter = Prompter(session, reader, self.registry, self.resource_factory)
        self.home: Path = Path.home()
        self._listeners: dict[ShellEvent, list[Listener]] = {event: [] for event in ShellEvent}

    @classmethod
    def create(
        cls,
        *,
        config_dir: Path = DEFAULT_CONFIG_DIR,
        verbose: bool = False,
        pretend: bool = False,
        color: bool = True,
        reader: LineReader | None = None,
    ) -> Shell:
        """Build a shell with the production collaborators.

        Raises
        ------
        EnvironmentError
            When no *reader* is given and prompt_toolkit is not installed.
        """
        if reader is None:
            from forge_shell.infra.terminal import PromptToolkitReader

            reader = PromptToolkitReader()

        session = Session()
        session.set_property(PROP_VERBOSE, verbose)
        session.pretend = pretend
        return cls(
            session,
            reader,
            history=HistoryStore(config_dir),
            config_store=ConfigStore(config_dir),
            expander=RichPromptExpander(color=color),
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: ShellEvent, listener: Listener) -> None:
        """Call *listener* with this shell whenever *event* fires."""
        self._listeners[event].append(listener)

    def _fire(self, event: ShellEvent) -> None:
        logger.debug("event %s", event.value)
        for listener in list(self._listeners[event]):
            listener(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def startup(self, working_dir: Path | None = None, *, restart: bool = False) -> None:
        """Prepare the session, load history and run the config script.

        History and config failures are reported and startup continues
        without them.
        """
        session = self.session
        session.set_property(PROP_OS_NAME, platform.system())
        session.set_property(PROP_CONFIG_DIR, str(self.config_store.config_dir))
        session.set_property(PROP_NO_MOTD, restart)
        self.set_current_resource(self.resource_factory.from_path(working_dir or Path.cwd()))

        try:
            self.reader.load_history(self.history.open())
        except HistoryError as exc:
            self.report(self.translator.translate(exc, verbose=session.verbose))
        self.reader.set_words(self.commands.names())

        self._fire(ShellEvent.STARTUP)
        self._run_config()
        self._fire(ShellEvent.POST_STARTUP)

    def _run_config(self) -> None:
        try:
            path = self.config_store.ensure_config_file()
            script = path.read_text(encoding="utf-8")
        except ConfigError as exc:
            self.report(self.translator.translate(exc, verbose=self.session.verbose))
            return
        except OSError as exc:
            logger.warning("could not read config script: %s", exc)
            return
        logger.debug("running config script %s", path)
        self.execute(script)

    def shutdown(self) -> None:
        self._fire(ShellEvent.PRE_SHUTDOWN)
        self.history.close()
        self._fire(ShellEvent.SHUTDOWN)

    def request_exit(self) -> None:
        """Stop the input loop at the next iteration boundary."""
        self.session.request_exit()

    # ------------------------------------------------------------------
    # Input loop
    # ------------------------------------------------------------------

    def render_prompt(self) -> str:
        return self.renderer.render(self.session)

    def run(self) -> None:
        """Read and execute lines until exit is requested."""
        session = self.session
        while not session.exit_requested:
            prompt = self.render_prompt()
            try:
                line = self.reader.read_line(prompt)
            except KeyboardInterrupt:
                logger.debug("interrupt during read ignored")
                line = ""

            if line is None:
                self._end_of_input()
                continue

            session.disarm_exit()
            if not line.strip():
                continue

            self.history.append(line)
            self.execute(line)

        console.print()

    def _end_of_input(self) -> None:
        if self.session.exit_armed:
            console.print(EXIT_MARKER, markup=False)
            self.session.request_exit()
        else:
            console.print()
            console.print(EOF_HINT, markup=False)
            self.session.arm_exit()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, script: str) -> bool:
        """Run *script* and report any failure; return ``True`` on success."""
        try:
            self.evaluator.run(script)
        except SystemExit:
            self.session.request_exit()
        except (Exception, KeyboardInterrupt) as exc:
            self.report(self.translator.translate(exc, verbose=self.session.verbose))
            return False
        return True

    def execute_file(self, path: Path, *arguments: str) -> None:
        """Run the script at *path* with positional *arguments*.

        Failures propagate to the caller.  In pretend mode the synthesized
        script is printed instead of run.
        """
        path = self._locate(Path(path))
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ShellExecutionError(f"could not read script: {path}") from exc

        invocation = ScriptInvocation(path=path, content=content, arguments=tuple(arguments))
        if self.session.pretend:
            console.print(self.wrapper.wrap(invocation).text, markup=False, end="")
            return
        self.wrapper.run(invocation)

    def _locate(self, path: Path) -> Path:
        path = path.expanduser()
        current = self.session.current_resource
        if path.is_absolute() or current is None:
            return path
        return context_directory(current) / path

    # ------------------------------------------------------------------
    # Location and reporting
    # ------------------------------------------------------------------

    def set_current_resource(self, resource: Resource) -> None:
        """Move to *resource* and bind the project that encloses it."""
        self.session.set_current_resource(resource)
        self.session.project = locate_project(resource)

    def report(self, report: ErrorReport) -> None:
        if report.level == "info":
            console.print(f"***INFO*** {report.message}", markup=False, style="yellow")
        else:
            err_console.print(f"***ERROR*** {report.message}", markup=False, style="bold red")
        if report.hint:
            err_console.print(f"Hint: {report.hint}", markup=False, style="yellow")
        if report.traceback:
            err_console.print(report.traceback, markup=False, end="")

    # ------------------------------------------------------------------
    # Command output
    # ------------------------------------------------------------------

    def print(self, text: str = "", *, color: str | None = None, end: str = "\n") -> None:
        """Write command output, in *color* (a Rich colour name) when given.

        Colour is dropped when the console has colour disabled
        (``--no-color``); markup in *text* is never interpreted.
        """
        console.print(text, markup=False, style=color, end=end)

    def print_verbose(self, text: str, *, color: str | None = None) -> None:
        """Like :meth:`print`, but only while the ``VERBOSE`` property is on."""
        if self.session.verbose:
            self.print(text, color=color)
