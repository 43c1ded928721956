"""Tests for ignore rules."""

from editor.ignore import IgnoreRules


def make_rules(tmp_path, gitignore="", globs=()):
    if gitignore:
        (tmp_path / ".gitignore").write_text(gitignore)
    return IgnoreRules.load(tmp_path, globs)


class TestIgnoreRules:
    """Test .gitignore and glob matching."""

    def test_no_gitignore(self, tmp_path):
        rules = make_rules(tmp_path)
        assert not rules.is_ignored(str(tmp_path / "main.py"))

    def test_git_directory(self, tmp_path):
        rules = make_rules(tmp_path)
        assert rules.is_ignored(str(tmp_path / ".git" / "config"))

    def test_patterns(self, tmp_path):
        """Test basename, directory and anchored patterns."""
        rules = make_rules(tmp_path, "# comment\n*.log\nbuild/\n/dist\n.env\n")
        assert rules.is_ignored(str(tmp_path / "debug.log"))
        assert rules.is_ignored(str(tmp_path / "logs" / "debug.log"))
        assert rules.is_ignored(str(tmp_path / "build" / "out.py"))
        assert rules.is_ignored(str(tmp_path / "dist" / "bundle.js"))
        assert rules.is_ignored(str(tmp_path / ".env"))
        assert not rules.is_ignored(str(tmp_path / "src" / "build.py"))
        assert not rules.is_ignored(str(tmp_path / "src" / "dist" / "x.py"))

    def test_negation(self, tmp_path):
        """Test that a later negated rule re-includes a file."""
        rules = make_rules(tmp_path, "*.log\n!keep.log\n")
        assert rules.is_ignored(str(tmp_path / "a.log"))
        assert not rules.is_ignored(str(tmp_path / "keep.log"))

    def test_configured_globs(self, tmp_path):
        rules = make_rules(tmp_path, globs=["*.lock", "secrets/*"])
        assert rules.is_ignored(str(tmp_path / "poetry.lock"))
        assert rules.is_ignored(str(tmp_path / "secrets" / "key.txt"))
        assert not rules.is_ignored(str(tmp_path / "app.py"))

    def test_outside_project(self, tmp_path):
        """Test that files outside the root only match configured globs."""
        project = tmp_path / "project"
        project.mkdir()
        rules = make_rules(project, "*.py\n", globs=["*.lock"])
        assert rules.is_ignored(str(tmp_path / "x.lock"))
        assert not rules.is_ignored(str(tmp_path / "x.py"))
