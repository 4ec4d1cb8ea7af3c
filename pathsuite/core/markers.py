"""Test method marker used by classes that do not extend unittest.TestCase."""

from typing import Any, Callable

TEST_MARKER_ATTR = "__pathsuite_test__"


def test(func: Callable) -> Callable:
    """Mark a method as an individually runnable test.

    Example:
        class ParserChecks:
            @test
            def parses_empty_input(self):
                assert parse("") == []
    """
    setattr(func, TEST_MARKER_ATTR, True)
    return func


# Keep pytest from collecting the decorator itself.
test.__test__ = False


def is_test_method(member: Any) -> bool:
    """Check whether a class member carries the test marker."""
    target = getattr(member, "__func__", member)
    return getattr(target, TEST_MARKER_ATTR, False) is True
