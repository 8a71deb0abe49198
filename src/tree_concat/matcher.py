"""
Ignore rule compilation and matching with .gitignore semantics.

Rules are kept as an ordered tuple and evaluated with a linear scan: the
polarity of the last matching rule decides whether a path is ignored.
Wildcard handling for each rule body is delegated to ``pathspec``.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import pathspec
import pathspec.pattern

from tree_concat.errors import PatternError

# Always ignored unless a later user rule re-includes it.
METADATA_DIR_RULE = ".git/"

IMPLICIT_SOURCE = "<implicit>"

# Regex group pathspec uses for its "anything below this directory" arm.
DESCENDANT_GROUP = "ps_d"


@dataclass(frozen=True)
class IgnoreRule:
    """One parsed line of an ignore file."""

    pattern: str
    negated: bool = False
    anchored: bool = False
    directory_only: bool = False
    source: str = "<string>"
    line_number: int = 0
    compiled: pathspec.pattern.RegexPattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.pattern:
            raise PatternError("empty pattern", self.source, self.line_number)

        # pathspec reads its own comment and negation markers and strips
        # surrounding spaces; escape them so the body stays a literal
        # positive pattern.
        body = "\\" + self.pattern if self.pattern[0] in "#! " else self.pattern
        if self.anchored:
            body = "/" + body

        try:
            spec = pathspec.GitIgnoreSpec.from_lines([body])
        except ValueError as e:
            raise PatternError(f"invalid pattern {self.pattern!r}: {e}", self.source, self.line_number) from e

        compiled = [p for p in spec.patterns if p.include is not None]
        if not compiled:
            raise PatternError(f"pattern {self.pattern!r} matches nothing", self.source, self.line_number)

        object.__setattr__(self, "compiled", compiled[0])

    def matches(self, relative_path: str, is_directory: bool) -> bool:
        """
        Check whether this rule matches a normalized root-relative path.

        Only the path itself is tested, never its parent directories.
        Polarity is not applied here; a negated rule still "matches".
        """
        if self.directory_only and not is_directory:
            return False

        result = self.compiled.match_file(relative_path)
        if result is None:
            return False
        # pathspec also matches everything below a matched directory and marks
        # that arm with a named group.
        return result.match.groupdict().get(DESCENDANT_GROUP) is None

    def __str__(self) -> str:
        text = self.pattern
        if self.anchored and "/" not in text:
            text = "/" + text
        if self.directory_only:
            text += "/"
        if self.negated:
            text = "!" + text
        return text


def _strip_line(line: str) -> str:
    """Remove the line ending and unescaped trailing spaces."""
    line = line.rstrip("\r\n")
    stripped = line.rstrip(" ")
    if stripped.endswith("\\") and len(stripped) < len(line):
        # "foo\ " keeps its escaped space
        stripped += " "
    return stripped


def parse_rule(line: str, source: str = "<string>", line_number: int = 0) -> IgnoreRule | None:
    """
    Parse a single ignore file line.

    Returns None for blank lines and comments.

    Raises:
        PatternError if the line holds no usable pattern
    """
    text = _strip_line(line)
    if not text.strip() or text.startswith("#"):
        return None

    negated = text.startswith("!")
    body = text[1:] if negated else text

    directory_only = body.endswith("/")
    if directory_only:
        body = body[:-1]

    rooted = body.startswith("/")
    if rooted:
        body = body[1:]

    if not body:
        raise PatternError(f"empty pattern in rule {line.strip()!r}", source, line_number)

    return IgnoreRule(
        pattern=body,
        negated=negated,
        anchored=rooted or "/" in body,
        directory_only=directory_only,
        source=source,
        line_number=line_number,
    )


def parse_lines(lines: Iterable[str], source: str = "<string>") -> list[IgnoreRule]:
    """Parse ignore file lines, skipping blanks and comments."""
    rules = []
    for line_number, line in enumerate(lines, start=1):
        rule = parse_rule(line, source, line_number)
        if rule is not None:
            rules.append(rule)
    return rules


def _implicit_rules() -> list[IgnoreRule]:
    return parse_lines([METADATA_DIR_RULE], source=IMPLICIT_SOURCE)


@dataclass(frozen=True)
class IgnoreRuleSet:
    """
    Compiled, ordered ignore rules bound to a root directory.

    The implicit metadata directory rule always comes first.
    """

    root: Path
    rules: tuple[IgnoreRule, ...] = ()

    @classmethod
    def from_lines(cls, root: str | Path, lines: Iterable[str], source: str = "<string>") -> "IgnoreRuleSet":
        rules = _implicit_rules() + parse_lines(lines, source)
        return cls(root=Path(root).resolve(), rules=tuple(rules))

    @property
    def user_rules(self) -> tuple[IgnoreRule, ...]:
        return tuple(r for r in self.rules if r.source != IMPLICIT_SOURCE)

    def normalize(self, path: str | Path) -> str | None:
        """
        Return path as a POSIX string relative to the root.

        Returns None for paths outside the root.
        """
        path = Path(path)
        if path.is_absolute():
            try:
                path = path.relative_to(self.root)
            except ValueError:
                return None
        relative = path.as_posix()
        if relative in ("", "."):
            return None
        return relative

    def matches(self, path: str | Path, is_directory: bool) -> bool:
        return matches(self, path, is_directory)

    def is_ignored(self, entry) -> bool:
        """Check a walker Entry."""
        return matches(self, entry.relative_path, entry.is_directory)


def matches(ruleset: IgnoreRuleSet, path: str | Path, is_directory: bool) -> bool:
    """
    Check whether path is ignored by ruleset.

    Every rule is evaluated in order and the last matching rule wins:
    an ignore rule ignores, a negated rule re-includes. With no matching
    rule the path is not ignored.
    """
    relative = ruleset.normalize(path)
    if relative is None:
        return False

    ignored = False
    for rule in ruleset.rules:
        if rule.matches(relative, is_directory):
            ignored = not rule.negated
    return ignored


def read_rule_source(path: Path, logger: logging.Logger | None = None) -> list[IgnoreRule]:
    """
    Parse the rules in one ignore file.

    A missing file yields no rules and a warning; a file that is not valid
    UTF-8 raises PatternError. Other read failures propagate as OSError.
    """
    logger = logger or logging.getLogger(__name__)

    if not path.exists():
        logger.warning(f"No ignore file found at: {path}")
        return []

    logger.info(f"Reading ignore file: {path}")
    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise PatternError(f"ignore file is not valid UTF-8 text ({e.reason})", str(path)) from e

    return parse_lines(text.splitlines(), source=str(path))


def compile_rules(
    root: str | Path,
    rule_sources: Iterable[str | Path],
    logger: logging.Logger | None = None,
    extra_patterns: Iterable[str] = (),
) -> IgnoreRuleSet:
    """
    Build an IgnoreRuleSet from ignore files, in the given order.

    extra_patterns are appended last, so they override the files.
    """
    rules = _implicit_rules()
    for source in rule_sources:
        rules.extend(read_rule_source(Path(source), logger))
    rules.extend(parse_lines(extra_patterns, source="<command line>"))
    return IgnoreRuleSet(root=Path(root).resolve(), rules=tuple(rules))
