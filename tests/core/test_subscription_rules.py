"""Unit tests for subscription access rules.

Pure function tests - no mocks needed.
"""

import pytest

from quake_notifier.core.errors import CityNotFound, PermissionDenied
from quake_notifier.core.subscriptions import Subscription, make_subscription, resolve_target


class TestResolveTarget:
    """Tests for resolve_target() function."""

    def test_defaults_to_self(self):
        assert resolve_target("1", None, is_admin=False) == "1"

    def test_self_explicitly(self):
        assert resolve_target("1", "1", is_admin=False) == "1"

    def test_admin_may_target_others(self):
        assert resolve_target("1", "2", is_admin=True) == "2"

    def test_non_admin_may_not_target_others(self):
        with pytest.raises(PermissionDenied):
            resolve_target("1", "2", is_admin=False)


class TestMakeSubscription:
    """Tests for make_subscription() function."""

    def test_normalizes_city(self):
        assert make_subscription("g", "1", " İzmir ") == Subscription("g", "1", "izmir")

    def test_empty_city(self):
        with pytest.raises(CityNotFound):
            make_subscription("g", "1", "   ")
