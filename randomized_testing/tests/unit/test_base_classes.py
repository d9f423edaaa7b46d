"""Unit tests for RandomizedTestBase."""

from __future__ import annotations

import threading
from typing import ClassVar
from unittest.mock import patch

import pytest
import structlog

from randomized_testing import versions
from randomized_testing.base_classes import (
    RandomizedTestBase,
    global_compatibility_version,
    master_seed,
)
from randomized_testing.fixtures.catalog import get_catalog
from randomized_testing.versions import Version


class TestSeeding:
    """Tests for master_seed() and setup_method()."""

    def test_master_seed_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test TESTS_SEED becomes the master seed."""
        monkeypatch.setenv("TESTS_SEED", "42")
        assert master_seed() == 42

    def test_generated_master_seed_is_logged_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a generated seed is stable for the process and logged."""
        monkeypatch.delenv("TESTS_SEED", raising=False)
        with structlog.testing.capture_logs() as logs:
            first = master_seed()
            second = master_seed()

        assert first == second
        seeded = [log for log in logs if log["event"] == "randomized_test.master_seed"]
        assert [log["seed"] for log in seeded] == [first]

    def test_setup_method_is_reproducible(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the same master seed and test name give the same sequence."""
        monkeypatch.setenv("TESTS_SEED", "7")

        class TestExample(RandomizedTestBase):
            def test_one(self) -> None: ...

        first = TestExample()
        first.setup_method(TestExample.test_one)
        second = TestExample()
        second.setup_method(TestExample.test_one)

        assert first.seed == second.seed
        assert first.seed.startswith("7:")
        assert [first.random.random() for _ in range(5)] == [
            second.random.random() for _ in range(5)
        ]

    def test_tests_get_independent_sequences(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test different test methods get different random sources."""
        monkeypatch.setenv("TESTS_SEED", "7")

        class TestExample(RandomizedTestBase):
            def test_one(self) -> None: ...

            def test_two(self) -> None: ...

        one = TestExample()
        one.setup_method(TestExample.test_one)
        two = TestExample()
        two.setup_method(TestExample.test_two)

        assert one.seed != two.seed
        assert one.random.random() != two.random.random()

    def test_setup_method_without_method(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test setup_method falls back to the class name."""
        monkeypatch.setenv("TESTS_SEED", "7")
        instance = RandomizedTestBase()
        instance.setup_method()
        assert instance.seed == "7:RandomizedTestBase"


class TestClassLifecycle:
    """Tests for setup_class()/teardown_class()."""

    def test_handler_installed_for_class(self) -> None:
        """Test the exception hook is swapped for the class and restored after."""

        class TestExample(RandomizedTestBase):
            pass

        original = threading.excepthook
        TestExample.setup_class()
        try:
            assert threading.excepthook is TestExample._exception_handler
        finally:
            TestExample.teardown_class()

        assert threading.excepthook is original
        assert TestExample._exception_handler is None

    def test_teardown_without_setup(self) -> None:
        """Test teardown_class is safe when setup_class never ran."""

        class TestExample(RandomizedTestBase):
            pass

        original = threading.excepthook
        TestExample.teardown_class()
        assert threading.excepthook is original


class TestPollingHelpers:
    """Tests for assert_busy()/await_busy() delegation."""

    def test_assert_busy_delegates(self) -> None:
        """Test assert_busy forwards to retry_until."""
        with patch(
            "randomized_testing.base_classes.randomized_test_base.retry_until",
            return_value="done",
        ) as mock_retry:
            assert RandomizedTestBase.assert_busy(lambda: None, 2.0) == "done"

        assert mock_retry.call_args.args[1] == 2.0

    def test_await_busy_delegates(self) -> None:
        """Test await_busy forwards to poll_until with the default budget."""
        with patch(
            "randomized_testing.base_classes.randomized_test_base.poll_until",
            return_value=True,
        ) as mock_poll:
            assert RandomizedTestBase.await_busy(lambda: True) is True

        assert mock_poll.call_args.args[1] == pytest.approx(10.0)

    def test_assert_busy_returns_value(self) -> None:
        """Test a passing block returns without waiting."""
        assert RandomizedTestBase.assert_busy(lambda: 3, 0.01) == 3


class TestVersionHelpers:
    """Tests for catalog-backed helpers."""

    @pytest.fixture
    def instance(self, monkeypatch: pytest.MonkeyPatch) -> RandomizedTestBase:
        monkeypatch.setenv("TESTS_SEED", "11")
        instance = RandomizedTestBase()
        instance.setup_method()
        return instance

    def test_all_and_previous_versions(self) -> None:
        """Test static helpers read the process-wide catalog."""
        assert RandomizedTestBase.all_versions() == get_catalog().all_versions()
        assert RandomizedTestBase.previous_version() == versions.V_1_6_0

    def test_random_version_uses_own_random(self, instance: RandomizedTestBase) -> None:
        """Test random_version draws from self.random by default."""
        assert instance.random_version() in get_catalog()

    def test_random_version_between(self, instance: RandomizedTestBase) -> None:
        """Test range sampling stays in range."""
        for _ in range(50):
            version = instance.random_version_between(versions.V_1_0_0, versions.V_1_2_0)
            assert versions.V_1_0_0 <= version <= versions.V_1_2_0

    def test_random_helpers(self, instance: RandomizedTestBase) -> None:
        """Test data helpers are bound to self.random."""
        assert instance.random_from([1, 2, 3]) in (1, 2, 3)
        assert instance.random_numeric_type() in ("byte", "short", "integer", "long")
        values = instance.generate_random_string_array(5, 4)
        assert values is not None and len(values) < 5


class TestCompatibilityVersion:
    """Tests for compatibility version resolution."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TESTS_COMPATIBILITY", raising=False)
        monkeypatch.delenv("TESTS_BWC_VERSION", raising=False)

    def test_global_defaults_to_current(self) -> None:
        """Test the global version is CURRENT when nothing is configured."""
        assert global_compatibility_version() == versions.CURRENT
        assert RandomizedTestBase().compatibility_version() == versions.CURRENT

    def test_global_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test TESTS_COMPATIBILITY sets the global version."""
        monkeypatch.setenv("TESTS_COMPATIBILITY", "1.3.0")
        assert global_compatibility_version() == versions.V_1_3_0

    def test_smallest_along_hierarchy(self) -> None:
        """Test the smallest declared version in the MRO wins."""

        class TestBase(RandomizedTestBase):
            compatibility: ClassVar[Version | None] = versions.V_1_2_0

        class TestChild(TestBase):
            compatibility: ClassVar[Version | None] = versions.V_1_4_0

        class TestGrandchild(TestChild):
            pass

        assert TestChild().compatibility_version() == versions.V_1_2_0
        assert TestGrandchild().compatibility_version() == versions.V_1_2_0

    def test_global_can_be_smaller(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a smaller global version overrides class declarations."""
        monkeypatch.setenv("TESTS_COMPATIBILITY", "1.0.0")

        class TestExample(RandomizedTestBase):
            compatibility: ClassVar[Version | None] = versions.V_1_4_0

        assert TestExample().compatibility_version() == versions.V_1_0_0
