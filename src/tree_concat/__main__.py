from tree_concat.cli import app

app(prog_name="tree-concat")
