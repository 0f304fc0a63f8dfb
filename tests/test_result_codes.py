"""Unit tests for result code translation."""

import pytest

from vixlib import constants
from vixlib.exceptions import OperationFailure
from vixlib.result_codes import Failure, Ok, Tolerated, check, translate


class TestTranslate:
    """Tests for translate()."""

    def test_ok(self) -> None:
        assert translate(constants.VIX_OK) == Ok()

    def test_ok_never_described(self) -> None:
        """describe() is only consulted for non-zero codes."""

        def describe(code: int) -> str:
            raise AssertionError("should not be called")

        assert translate(constants.VIX_OK, describe=describe) == Ok()

    def test_tolerated(self) -> None:
        outcome = translate(
            constants.VIX_E_FILE_NOT_FOUND,
            {constants.VIX_E_FILE_NOT_FOUND},
            describe=lambda code: "not there",
        )
        assert outcome == Tolerated(constants.VIX_E_FILE_NOT_FOUND, "not there")

    def test_failure_uses_describe(self) -> None:
        outcome = translate(constants.VIX_E_AUTHENTICATION_FAIL, describe=lambda code: f"text {code}")
        assert outcome == Failure(constants.VIX_E_AUTHENTICATION_FAIL, "text 35")

    def test_failure_default_message(self) -> None:
        outcome = translate(constants.VIX_E_FAIL)
        assert isinstance(outcome, Failure)
        assert outcome.message == "VIX error 1"

    def test_tolerance_is_per_call(self) -> None:
        """The same code is tolerated in one call and a failure in another."""
        code = constants.VIX_E_UNRECOGNIZED_PROPERTY
        assert isinstance(translate(code, {code}), Tolerated)
        assert isinstance(translate(code), Failure)


class TestCheck:
    """Tests for check()."""

    def test_ok_returns_true(self) -> None:
        assert check(constants.VIX_OK) is True

    def test_tolerated_returns_false(self) -> None:
        assert check(constants.VIX_E_SNAPSHOT_NOTFOUND, (constants.VIX_E_SNAPSHOT_NOTFOUND,)) is False

    def test_failure_raises_with_code(self) -> None:
        with pytest.raises(OperationFailure) as exc_info:
            check(constants.VIX_E_VM_NOT_RUNNING, describe=lambda code: "The virtual machine is not powered on")

        assert exc_info.value.code == constants.VIX_E_VM_NOT_RUNNING
        assert exc_info.value.message == "The virtual machine is not powered on"
        assert exc_info.value.context["code"] == constants.VIX_E_VM_NOT_RUNNING
        assert str(exc_info.value) == "The virtual machine is not powered on (code 3006)"
