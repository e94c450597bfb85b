"""User rule scripts, evaluated with simpleeval."""

import ast
import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from simpleeval import EvalWithCompoundTypes, InvalidExpression, MultipleExpressions

from labeller.errors import ScriptEvaluationError, ScriptLoadError

from .facts import FactRecord

DEFAULT_SCRIPT_PATH = "~/.labeller.script"

# Parsing needs no names or functions.
_PARSER = EvalWithCompoundTypes()


def get_script_path() -> Path:
    """Get the rule script path from environment."""
    return Path(os.getenv("LABELLER_SCRIPT", DEFAULT_SCRIPT_PATH)).expanduser()


def _match(pattern: str, text: Any) -> bool:
    return re.search(pattern, str(text)) is not None


# Helpers available to every script, besides add() and remove().
SCRIPT_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "len": len,
    "lower": lambda text: str(text).lower(),
    "upper": lambda text: str(text).upper(),
    "match": _match,
    "str": str,
    "int": int,
}


@dataclass(frozen=True)
class Rule:
    """One expression of a script, with the line it starts on and its parsed tree."""

    line: int
    source: str
    tree: ast.Expr = field(compare=False, repr=False)


def _parse_expression(line: int, source: str) -> ast.Expr:
    with warnings.catch_warnings():
        warnings.simplefilter("error", MultipleExpressions)
        try:
            node = _PARSER.parse(source)
        except SyntaxError as e:
            raise ScriptLoadError(f"line {line}: {e.msg}: {source}") from e
        except (InvalidExpression, MultipleExpressions) as e:
            raise ScriptLoadError(f"line {line}: {e}: {source}") from e

    if not isinstance(node, ast.Expr):
        raise ScriptLoadError(f"line {line}: not an expression: {source}")
    return node


def parse_rules(source: str) -> list[Rule]:
    """
    Split a script into its expressions and parse each one.

    Each non-blank line is an expression; lines starting with '#' are
    comments and a trailing backslash continues an expression on the next
    line.

    Raises:
        ScriptLoadError: If a line is not a single valid expression.
    """
    chunks: list[tuple[int, str]] = []
    pending: list[str] = []
    start = 0

    for number, raw in enumerate(source.splitlines(), start=1):
        line = raw.strip()
        if not pending and (not line or line.startswith("#")):
            continue
        if not pending:
            start = number

        if line.endswith("\\"):
            pending.append(line[:-1])
            continue

        pending.append(line)
        chunks.append((start, " ".join(pending).strip()))
        pending = []

    if pending:
        chunks.append((start, " ".join(pending).strip()))

    return [
        Rule(line=line, source=text, tree=_parse_expression(line, text))
        for line, text in chunks
    ]


def fact_names(facts: FactRecord) -> dict[str, Any]:
    """
    The names a script sees for one message.

    'from' is a Python keyword, so the sender is exposed as 'from_' and as
    'From'; every field also has a capitalized spelling.
    """
    names = {
        "to": facts.to,
        "toPart": facts.to_local_part,
        "toDomain": facts.to_domain,
        "from_": facts.sender,
        "fromPart": facts.sender_local_part,
        "fromDomain": facts.sender_domain,
        "subject": facts.subject,
        "labels": facts.labels,
    }
    names.update({
        "To": facts.to,
        "ToPart": facts.to_local_part,
        "ToDomain": facts.to_domain,
        "From": facts.sender,
        "FromPart": facts.sender_local_part,
        "FromDomain": facts.sender_domain,
        "Subject": facts.subject,
        "Labels": facts.labels,
    })
    return names


class RuleScript:
    """
    A loaded rule script.

    The result of each expression is ignored: a script acts on a message
    only through the functions it is given, add() and remove().
    """

    def __init__(self, source: str, path: Path | None = None):
        """
        Parse a script.

        Raises:
            ScriptLoadError: If the script is not valid syntax.
        """
        self.path = path
        self.source = source
        self.rules = parse_rules(source)

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "RuleScript":
        """
        Load a script from disk, LABELLER_SCRIPT or ~/.labeller.script by default.

        Raises:
            ScriptLoadError: If the file cannot be read or parsed.
        """
        path = Path(path).expanduser() if path else get_script_path()
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ScriptLoadError(f"failed to read the script {path} - {e}") from e

        try:
            return cls(source, path=path)
        except ScriptLoadError as e:
            raise ScriptLoadError(f"failed to parse the script {path} - {e}") from e

    def __len__(self) -> int:
        return len(self.rules)

    def evaluate(
        self,
        facts: FactRecord,
        functions: dict[str, Callable[..., Any]],
    ) -> None:
        """
        Run every expression against one message, top to bottom.

        Args:
            facts: The message's fact record, the script's only input.
            functions: Host functions to expose, e.g. add and remove.

        Raises:
            ScriptEvaluationError: If an expression fails. Expressions before
                it have already run.
        """
        evaluator = EvalWithCompoundTypes(
            functions={**SCRIPT_FUNCTIONS, **functions},
            names=fact_names(facts),
        )

        for rule in self.rules:
            try:
                evaluator.eval(rule.source, previously_parsed=rule.tree)
            except ScriptEvaluationError as e:
                raise type(e)(f"line {rule.line}: {e}") from e
            except Exception as e:
                raise ScriptEvaluationError(f"line {rule.line}: {e}") from e
