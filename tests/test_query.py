"""Tests for errchain.query module."""

from types import SimpleNamespace

from errchain.errors import AppError, DatabaseError, ErrorKind, NotFoundError, ValidationError
from errchain.query import as_error, cause_of, has_tag, is_error, iter_chain


class ForeignError(Exception):
    """Exception from another library that follows the ``cause`` convention."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class TestIsError:
    """Test is_error on chain nodes and foreign values."""

    def test_direct_match(self):
        assert is_error(NotFoundError("User"), NotFoundError)

    def test_match_in_cause_chain(self, user_profile_error):
        assert is_error(user_profile_error, ErrorKind.DATABASE)
        assert is_error(user_profile_error, NotFoundError)

    def test_no_match(self, user_profile_error):
        assert not is_error(user_profile_error, ValidationError)

    def test_non_error_values(self):
        assert not is_error("error string", NotFoundError)
        assert not is_error(None, NotFoundError)
        assert not is_error({"cause": NotFoundError("User")}, NotFoundError)

    def test_walks_native_cause(self):
        """raise ... from ... links are followed through __cause__."""
        try:
            try:
                raise DatabaseError("SELECT", "Connection refused")
            except DatabaseError as exc:
                raise RuntimeError("handler failed") from exc
        except RuntimeError as outer:
            assert is_error(outer, ErrorKind.DATABASE)

    def test_walks_foreign_cause_attribute(self):
        foreign = ForeignError("wrapper", cause=NotFoundError("User", "1"))
        assert is_error(foreign, NotFoundError)

    def test_walks_app_error_over_foreign_link(self):
        inner = ForeignError("driver", cause=DatabaseError("SELECT", "x"))
        outer = ForeignError("service", cause=inner)
        assert as_error(outer, DatabaseError).operation == "SELECT"


class TestAsError:
    """Test as_error returns the first match."""

    def test_returns_first_match(self):
        inner = NotFoundError("Order", "1")
        outer = NotFoundError("User", "2", cause=inner)
        assert as_error(outer.wrap("ctx"), NotFoundError) is outer

    def test_returns_none_when_absent(self, user_profile_error):
        assert as_error(user_profile_error, ValidationError) is None

    def test_returns_reference_into_chain(self, user_profile_error):
        assert as_error(user_profile_error, DatabaseError) is user_profile_error.root_cause()


class TestHasTag:
    """Test has_tag by string."""

    def test_dynamic_tag(self):
        from errchain.errors import define_error

        Custom = define_error("ShardOfflineError", lambda p: f"Shard {p['shard']} offline")
        error = Custom({"shard": 3}).wrap("Query failed")
        assert has_tag(error, "ShardOfflineError")
        assert not has_tag(error, "DatabaseError")


class TestIterChain:
    """Test iter_chain and cause_of."""

    def test_iter_chain_order(self, user_profile_error):
        assert list(iter_chain(user_profile_error)) == user_profile_error.chain_list()

    def test_cause_of_prefers_explicit_cause(self):
        explicit = NotFoundError("User")
        error = ForeignError("outer", cause=explicit)
        error.__cause__ = ValueError("native")
        assert cause_of(error) is explicit

    def test_cause_of_plain_value(self):
        assert cause_of(42) is None

    def test_cycle_terminates(self):
        """A foreign cause cycle stops at the first revisit."""
        first = ForeignError("first")
        second = ForeignError("second", cause=first)
        first.cause = second
        assert list(iter_chain(first)) == [first, second]
        assert not is_error(first, NotFoundError)

    def test_app_error_raised_from_foreign(self):
        """An AppError raised from a native exception exposes it via __cause__."""
        try:
            try:
                raise KeyError("missing")
            except KeyError as exc:
                raise AppError("lookup failed") from exc
        except AppError as error:
            links = list(iter_chain(error))
        assert len(links) == 2
        assert isinstance(links[1], KeyError)

    def test_plain_object_cause_is_not_followed(self):
        """Only exceptions have cause links; other objects are a single link."""
        holder = SimpleNamespace(cause=NotFoundError("User"))
        assert cause_of(holder) is None
        assert list(iter_chain(holder)) == [holder]
        assert not is_error(holder, NotFoundError)
