"""
Tests for ignore rule parsing and matching.
"""
import logging

import pytest

from tree_concat.errors import PatternError
from tree_concat.matcher import IgnoreRuleSet, compile_rules, matches, parse_lines, parse_rule


def test_blank_and_comment_lines_are_skipped():
    """Blank lines and '#' comments produce no rules."""
    assert parse_rule("") is None
    assert parse_rule("   \n") is None
    assert parse_rule("# build output") is None
    assert len(parse_lines(["", "# comment", "*.log", "  "])) == 1


def test_rule_flags():
    """Markers set negation, anchoring and directory-only flags."""
    rule = parse_rule("!keep.log")
    assert rule.negated
    assert rule.pattern == "keep.log"
    assert not rule.anchored
    assert not rule.directory_only

    rule = parse_rule("/build")
    assert rule.anchored
    assert rule.pattern == "build"

    rule = parse_rule("cache/")
    assert rule.directory_only
    assert not rule.anchored

    # A slash inside the pattern anchors it too
    assert parse_rule("src/build").anchored


def test_rule_str_round_trips_markers():
    """A rule renders back to its ignore-file spelling."""
    assert str(parse_rule("!/dist/")) == "!/dist/"
    assert str(parse_rule("*.pyc")) == "*.pyc"


def test_trailing_spaces_are_stripped():
    """Unescaped trailing spaces are not part of the pattern."""
    rule = parse_rule("notes.txt   \n", line_number=3)
    assert rule.pattern == "notes.txt"
    assert rule.line_number == 3


def test_escaped_hash_is_a_literal_pattern(tmp_path):
    """'\\#' matches a file whose name starts with '#'."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["\\#draft.md"])
    assert matches(ruleset, "#draft.md", is_directory=False)
    assert not matches(ruleset, "draft.md", is_directory=False)


@pytest.mark.parametrize("line", ["!", "/", "!/", "//"])
def test_empty_patterns_raise_pattern_error(line):
    """A rule with nothing left after its markers is malformed."""
    with pytest.raises(PatternError):
        parse_rule(line, source=".gitignore", line_number=7)


def test_pattern_error_reports_location():
    """PatternError carries the source and line of the bad rule."""
    with pytest.raises(PatternError) as exc_info:
        parse_lines(["*.log", "!"], source="custom.ignore")

    assert exc_info.value.source == "custom.ignore"
    assert exc_info.value.line_number == 2
    assert "custom.ignore:2" in str(exc_info.value)


def test_last_matching_rule_wins(tmp_path):
    """A later negation re-includes; reversing the order excludes again."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["*.log", "!keep.log"])
    assert not matches(ruleset, "keep.log", is_directory=False)
    assert matches(ruleset, "other.log", is_directory=False)

    reversed_ruleset = IgnoreRuleSet.from_lines(tmp_path, ["!keep.log", "*.log"])
    assert matches(reversed_ruleset, "keep.log", is_directory=False)


def test_no_matching_rule_means_not_ignored(tmp_path):
    """Paths no rule touches are kept."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["*.log"])
    assert not matches(ruleset, "main.py", is_directory=False)


def test_anchored_rule_only_matches_at_root(tmp_path):
    """'/build' ignores the top-level build directory only."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["/build"])
    assert matches(ruleset, "build", is_directory=True)
    assert not matches(ruleset, "src/build", is_directory=True)


def test_unanchored_rule_matches_at_any_depth(tmp_path):
    """'build' ignores build directories everywhere."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["build"])
    assert matches(ruleset, "build", is_directory=True)
    assert matches(ruleset, "src/build", is_directory=True)
    assert matches(ruleset, "a/b/c/build", is_directory=False)


def test_directory_only_rule(tmp_path):
    """'logs/' matches directories only; file candidates skip it."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["logs/"])
    assert matches(ruleset, "logs", is_directory=True)
    assert matches(ruleset, "app/logs", is_directory=True)
    assert not matches(ruleset, "logs", is_directory=False)
    # files below an ignored directory are pruned by the walker, not matched here
    assert not matches(ruleset, "logs/today.txt", is_directory=False)


def test_rules_only_test_the_path_itself(tmp_path):
    """A rule naming a directory does not match the files inside it."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["*", "!src"])
    assert not matches(ruleset, "src", is_directory=True)
    assert matches(ruleset, "src/a.log", is_directory=False)
    assert matches(ruleset, "src/lib/b.py", is_directory=False)


def test_negated_directory_only_rule_leaves_files_ignored(tmp_path):
    """'!keep/' re-includes the directory, not the files under it."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["*", "!keep/"])
    assert not matches(ruleset, "keep", is_directory=True)
    assert not matches(ruleset, "a/keep", is_directory=True)
    assert matches(ruleset, "keep", is_directory=False)
    assert matches(ruleset, "keep/x.txt", is_directory=False)


def test_negated_plain_rule_naming_a_directory(tmp_path):
    """'!logs' after '*.log' re-includes only paths named logs."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["*.log", "!logs"])
    assert not matches(ruleset, "logs", is_directory=True)
    assert matches(ruleset, "logs/a.log", is_directory=False)
    assert not matches(ruleset, "logs/a.txt", is_directory=False)


def test_leading_space_is_part_of_the_pattern(tmp_path):
    """'! foo' re-includes ' foo', not 'foo'."""
    rule = parse_rule("! foo.txt")
    assert rule.negated
    assert rule.pattern == " foo.txt"

    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["*.txt", "! foo.txt"])
    assert not matches(ruleset, " foo.txt", is_directory=False)
    assert matches(ruleset, "foo.txt", is_directory=False)


def test_double_star_matches_zero_or_more_segments(tmp_path):
    """'**' spans any number of directories, including none."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["docs/**/*.tmp"])
    assert matches(ruleset, "docs/x.tmp", is_directory=False)
    assert matches(ruleset, "docs/a/b/x.tmp", is_directory=False)
    assert not matches(ruleset, "other/x.tmp", is_directory=False)


def test_single_character_wildcards(tmp_path):
    """'?' and character classes follow shell glob semantics."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["file?.txt", "[ab].md"])
    assert matches(ruleset, "file1.txt", is_directory=False)
    assert not matches(ruleset, "file10.txt", is_directory=False)
    assert matches(ruleset, "a.md", is_directory=False)
    assert not matches(ruleset, "c.md", is_directory=False)


def test_metadata_directory_is_always_ignored(tmp_path):
    """The implicit '.git/' rule applies with no user rules."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, [])
    assert len(ruleset.rules) == 1
    assert ruleset.user_rules == ()
    assert matches(ruleset, ".git", is_directory=True)
    assert matches(ruleset, "vendor/lib/.git", is_directory=True)
    assert not matches(ruleset, ".gitignore", is_directory=False)


def test_metadata_rule_can_be_overridden(tmp_path):
    """A user negation placed after the implicit rule re-includes .git."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["!.git/"])
    assert not matches(ruleset, ".git", is_directory=True)


def test_absolute_paths_are_made_relative(tmp_path):
    """Absolute candidates are normalized against the root."""
    root = tmp_path.resolve()
    ruleset = IgnoreRuleSet.from_lines(root, ["/build"])
    assert ruleset.matches(root / "build", is_directory=True)
    assert not ruleset.matches(root / "src" / "build", is_directory=True)


def test_paths_outside_root_are_not_ignored(tmp_path):
    """A path that is not under the root never matches."""
    root = (tmp_path / "project").resolve()
    ruleset = IgnoreRuleSet.from_lines(root, ["*"])
    assert not ruleset.matches(tmp_path.resolve() / "elsewhere.txt", is_directory=False)


def test_compile_missing_source_is_advisory(tmp_path, caplog):
    """A missing ignore file leaves only the implicit rule and logs a warning."""
    logger = logging.getLogger("tree_concat.tests")

    with caplog.at_level(logging.WARNING, logger="tree_concat.tests"):
        ruleset = compile_rules(tmp_path, [tmp_path / ".gitignore"], logger=logger)

    assert ruleset.user_rules == ()
    assert "No ignore file found at" in caplog.text


def test_compile_reads_sources_in_order(tmp_path):
    """Rules from later sources and extra patterns override earlier ones."""
    first = tmp_path / "first.ignore"
    first.write_text("*.log\n")
    second = tmp_path / "second.ignore"
    second.write_text("!keep.log\n")

    ruleset = compile_rules(tmp_path, [first, second])
    assert not ruleset.matches("keep.log", is_directory=False)

    ruleset = compile_rules(tmp_path, [first], extra_patterns=["!keep.log", "debug.log"])
    assert not ruleset.matches("keep.log", is_directory=False)
    assert ruleset.matches("debug.log", is_directory=False)
    assert [r.source for r in ruleset.user_rules] == [str(first), "<command line>", "<command line>"]


def test_compile_rejects_undecodable_source(tmp_path):
    """An ignore file that is not UTF-8 cannot be parsed."""
    source = tmp_path / ".gitignore"
    source.write_bytes(b"*.log\n\xff\xfe\n")

    with pytest.raises(PatternError):
        compile_rules(tmp_path, [source])


def test_ruleset_is_immutable(tmp_path):
    """Compiled rule sets cannot be modified."""
    ruleset = IgnoreRuleSet.from_lines(tmp_path, ["*.log"])
    assert isinstance(ruleset.rules, tuple)
    with pytest.raises(Exception):
        ruleset.rules = ()
