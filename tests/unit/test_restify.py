"""
Unit tests for restify() and Resource.
"""

import pytest

from tollgate.dispatcher import Dispatcher
from tollgate.errors import ConfigurationError
from tollgate.http.filters import FilterRegistry
from tollgate.http.resource import REST_ACTIONS, Resource, restify
from tollgate.http.router import Router


class Pages:
    """Resource implementing only index and show."""

    def index(self):
        return "all pages"

    def show(self, id):
        return f"page {id}"


class FullResource:
    def index(self):
        return "index"

    def new(self):
        return "new"

    def create(self):
        return "create"

    def show(self, id):
        return f"show {id}"

    def edit(self, id):
        return f"edit {id}"

    def update(self, id):
        return f"update {id}"

    def delete(self, id):
        return f"delete {id}"


class TestRestify:
    """Tests for restify()."""

    def test_partial_resource(self, router):
        """Test only implemented actions are registered."""
        entries = restify(router, "/pages", Pages())

        assert [(e.method, e.template) for e in entries] == [
            ("GET", "/pages"),
            ("GET", "/pages/:id"),
        ]
        assert len(router) == 2

    def test_missing_actions_are_not_found(self, router):
        """Test requests for unimplemented actions miss."""
        restify(router, "/pages", Pages())
        dispatcher = Dispatcher(router, FilterRegistry())

        assert dispatcher.dispatch("GET", "/pages").body == b"all pages"
        assert dispatcher.dispatch("GET", "/pages/3").body == b"page 3"
        assert dispatcher.dispatch("POST", "/pages").status == 404
        assert dispatcher.dispatch("PUT", "/pages/3").status == 404
        assert dispatcher.dispatch("DELETE", "/pages/3").status == 404
        assert dispatcher.dispatch("GET", "/pages/3/edit").status == 404

    def test_full_resource(self, router):
        """Test all seven routes, with new before show."""
        entries = restify(router, "pages/", FullResource())

        assert [(e.method, e.template) for e in entries] == [
            ("GET", "/pages"),
            ("GET", "/pages/new"),
            ("POST", "/pages"),
            ("GET", "/pages/:id"),
            ("GET", "/pages/:id/edit"),
            ("PUT", "/pages/:id"),
            ("DELETE", "/pages/:id"),
        ]
        assert router.match("GET", "/pages/new").entry.handler.__name__ == "new"

    def test_root_base(self, router):
        """Test restify on '/' registers at the site root."""
        restify(router, "/", Pages())

        assert router.match("GET", "/") is not None
        assert router.match("GET", "/9").values == ("9",)

    def test_mapping(self, router):
        """Test a mapping of action → callable."""
        entries = restify(router, "/tags", {"index": lambda: "tags"})
        assert [e.template for e in entries] == ["/tags"]

    def test_mapping_unknown_action(self, router):
        """Test unknown mapping keys are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown REST actions: destroy"):
            restify(router, "/tags", {"destroy": lambda id: None})

    def test_non_callable_attributes_ignored(self, router):
        """Test object attributes that are not callable are skipped."""
        class Odd:
            index = "not callable"

            def show(self, id):
                return id

        entries = restify(router, "/odd", Odd())
        assert [e.template for e in entries] == ["/odd/:id"]


class TestResource:
    """Tests for the Resource descriptor."""

    def test_explicit_descriptor(self):
        """Test actions() yields only implemented actions in table order."""
        show = lambda id: id
        index = lambda: "all"
        resource = Resource(show=show, index=index)

        assert [(name, method, suffix) for name, method, suffix, _ in resource.actions()] == [
            ("index", "GET", ""),
            ("show", "GET", "/:id"),
        ]

    def test_non_callable_action(self):
        """Test non-callable actions are rejected at construction."""
        with pytest.raises(ConfigurationError, match="'edit' is not callable"):
            Resource(edit="nope")

    def test_of_is_identity_for_resource(self):
        """Test Resource.of() returns an existing Resource unchanged."""
        resource = Resource(index=lambda: None)
        assert Resource.of(resource) is resource

    def test_seven_actions(self):
        """Test the conventional action table."""
        assert [name for name, _, _ in REST_ACTIONS] == [
            "index", "new", "create", "show", "edit", "update", "delete",
        ]
