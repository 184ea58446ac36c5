import asyncio
import logging
import sys
import traceback

from replout.replout_config import ReploutConfig, load_config
from replout.replout_output import none, some, to_json
from replout.replout_printer import DisplayPrinter
from replout.replout_result import Some
from replout.replout_source import source
from replout.replout_transformer import Transformer

logger = logging.getLogger("replout")


# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)


class Session:
    """Evaluates REPL lines in one namespace and renders each outcome."""

    def __init__(self, config: ReploutConfig):
        self.config = config
        self.namespace = {"__name__": "__replout__"}
        self.transformer = Transformer(config)
        self.printer = DisplayPrinter(self.transformer, config.indent_width, config.expand_depth)

    def evaluate(self, line: str):
        """Returns a Some/Nothing outcome and, for failures, the diagnostic text."""
        try:
            code = compile(line, "<repl>", "eval")
        except SyntaxError:
            # Not an expression; run it as a statement below
            code = None
        try:
            if code is None:
                exec(compile(line, "<repl>", "exec"), self.namespace)
                return None, ""
            return some(eval(code, self.namespace)), ""
        except Exception:
            # Drop the frame for this method so the trace starts in user code
            etype, exc, tb = sys.exc_info()
            text = "".join(traceback.format_exception(etype, exc, tb.tb_next))
            lines = text.rstrip("\n").splitlines()
            if lines and lines[0].startswith("Traceback"):
                lines = lines[1:]
            # Headline first, frames after
            return none(), "\n".join(lines[-1:] + lines[:-1])

    def render(self, line: str):
        """Returns (text, is_error) for one line, or None when there is nothing to show."""
        if line.startswith(".json "):
            parsed = to_json(line[len(".json "):])
            if not parsed.ok:
                return self.printer.pformat(none().highlight(f"JSONError: {parsed.error}").formatted_output), True
            outcome = some(parsed.value)
            diagnostic = ""
        elif line.startswith(".source "):
            return self.printer.pformat(source(line[len(".source "):].strip())), False
        else:
            outcome, diagnostic = self.evaluate(line)
            if outcome is None or (isinstance(outcome, Some) and outcome.value is None):
                return None

        result = outcome.highlight(diagnostic, self.transformer)
        return self.printer.pformat(result.formatted_output), result.error


def _parse_args(argv):
    config = ReploutConfig()
    args = list(argv)
    if args and args[0] == "--config":
        if len(args) < 2:
            print("Error: --config requires a file path", file=sys.stderr)
            raise SystemExit(2)
        try:
            config = load_config(args[1])
        except FileNotFoundError:
            print(f"Error: file not found: {args[1]}", file=sys.stderr)
            raise SystemExit(1)
        except ValueError as e:
            print(f"Error: invalid config: {e}", file=sys.stderr)
            raise SystemExit(1)
    return config


async def main():
    """Start the interactive REPL."""
    config = _parse_args(sys.argv[1:])
    logging.basicConfig(level=config.logging_level, format="%(levelname)s %(name)s: %(message)s")

    print("replout REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    session = Session(config)

    # REPL Loop
    while True:
        try:
            raw = await ainput(">>> ")
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line == "exit":
                break

            rendered = session.render(line)
            if rendered is None:
                continue
            text, is_error = rendered
            print(text, file=sys.stderr if is_error else sys.stdout)

        except EOFError:
            print("\nExiting.")
            break
        except Exception as e:
            logger.debug("unhandled REPL failure", exc_info=True)
            print(f"Error: {e}", file=sys.stderr)

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")
