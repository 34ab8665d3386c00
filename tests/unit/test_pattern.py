"""
Unit tests for route template compilation.
"""

import pytest

from tollgate.errors import ConfigurationError
from tollgate.http.router import compile_pattern


class TestCompilePattern:
    """Tests for compile_pattern()."""

    def test_literal_template(self):
        """Test a template without symbols matches only itself."""
        pattern = compile_pattern("/users/list")

        assert pattern.symbols == ()
        assert pattern.wildcard is False
        assert pattern.match("/users/list") == ()
        assert pattern.match("/users/list/more") is None
        assert pattern.match("/users") is None

    def test_symbols_in_order(self):
        """Test symbols are captured in template order."""
        pattern = compile_pattern("/users/:user_id/posts/:post_id")

        assert pattern.symbols == ("user_id", "post_id")
        assert pattern.match("/users/7/posts/42") == ("7", "42")

    def test_symbol_does_not_cross_segments(self):
        """Test a symbol captures exactly one segment."""
        pattern = compile_pattern("/users/:id")

        assert pattern.match("/users/1/2") is None
        assert pattern.match("/users/") is None

    def test_literals_are_case_sensitive(self):
        """Test literal segments must match exactly."""
        pattern = compile_pattern("/Users/:id")

        assert pattern.match("/Users/1") == ("1",)
        assert pattern.match("/users/1") is None

    def test_regex_characters_are_literal(self):
        """Test '.' and '+' in a template are not regex operators."""
        pattern = compile_pattern("/files/a.b+c")

        assert pattern.match("/files/a.b+c") == ()
        assert pattern.match("/files/aXbbc") is None
        assert pattern.match("/files/abbbc") is None

    def test_anchored_to_full_path(self):
        """Test there are no prefix or suffix partial matches."""
        pattern = compile_pattern("/blog")

        assert pattern.match("/blog") == ()
        assert pattern.match("/blogs") is None
        assert pattern.match("/x/blog") is None

    def test_leading_slash_optional(self):
        """Test templates without a leading slash are normalized."""
        pattern = compile_pattern("users/:id")

        assert pattern.template == "/users/:id"
        assert pattern.match("/users/3") == ("3",)

    def test_root_template(self):
        """Test the root template matches only '/'."""
        pattern = compile_pattern("/")

        assert pattern.match("/") == ()
        assert pattern.match("/x") is None


class TestWildcard:
    """Tests for trailing wildcards."""

    def test_wildcard_captures_rest(self):
        """Test the wildcard captures the remainder including slashes."""
        pattern = compile_pattern("/files/*")

        assert pattern.wildcard is True
        assert pattern.match("/files/css/site/main.css") == ("css/site/main.css",)

    def test_wildcard_appended_after_symbols(self):
        """Test the wildcard value comes after the named symbols."""
        pattern = compile_pattern("/repos/:owner/*")

        assert pattern.match("/repos/ann/src/lib/x.py") == ("ann", "src/lib/x.py")

    def test_wildcard_may_be_empty(self):
        """Test the wildcard matches an empty remainder."""
        pattern = compile_pattern("/files/*")

        assert pattern.match("/files") == ("",)

    def test_named_wildcard(self):
        """Test '*name' gives the remainder a name."""
        pattern = compile_pattern("/static/*path")

        assert pattern.wildcard_name == "path"
        assert pattern.names == ("path",)
        assert pattern.match("/static/js/app.js") == ("js/app.js",)

    def test_bare_wildcard_has_no_name(self):
        """Test a bare '*' appears as None among the pattern names."""
        pattern = compile_pattern("/u/:id/*")

        assert pattern.names == ("id", None)

    def test_catch_all(self):
        """Test '/*' matches every path, root included."""
        pattern = compile_pattern("/*")

        assert pattern.match("/") == ("",)
        assert pattern.match("/a/b/c") == ("a/b/c",)


class TestCompileErrors:
    """Tests for malformed templates."""

    def test_duplicate_symbol(self):
        """Test the same symbol twice is rejected."""
        with pytest.raises(ConfigurationError, match="Duplicate symbol"):
            compile_pattern("/a/:id/b/:id")

    def test_duplicate_wildcard_name(self):
        """Test a wildcard may not reuse a symbol name."""
        with pytest.raises(ConfigurationError, match="Duplicate symbol"):
            compile_pattern("/a/:path/*path")

    def test_wildcard_not_last(self):
        """Test a wildcard in the middle is rejected."""
        with pytest.raises(ConfigurationError, match="last segment"):
            compile_pattern("/files/*/meta")

    @pytest.mark.parametrize("template", ["/users/:", "/users/:1st", "/users/:a-b"])
    def test_invalid_symbol_name(self, template):
        """Test empty and non-identifier symbol names are rejected."""
        with pytest.raises(ConfigurationError, match="Invalid symbol"):
            compile_pattern(template)
