"""Translation of native result codes.

A VIX result code means one of three things to the code that received it:

- Ok: the call succeeded.
- Tolerated: a failure the calling algorithm expects and treats as a normal
  outcome, e.g. "file not found" while listing a directory means "empty".
- Failure: anything else; surfaced as OperationFailure with the code and
  the surface's localized description.

Which codes are tolerated depends on the caller. The same code can be fatal
in one place and expected in another, so the tolerated set is always a
parameter and never a module-wide table.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass

from vixlib import constants
from vixlib.exceptions import OperationFailure


@dataclass(frozen=True, slots=True)
class Ok:
    pass


@dataclass(frozen=True, slots=True)
class Tolerated:
    code: int
    reason: str


@dataclass(frozen=True, slots=True)
class Failure:
    code: int
    message: str

    def to_exception(self) -> OperationFailure:
        return OperationFailure(self.code, self.message)


Outcome = Ok | Tolerated | Failure

Describe = Callable[[int], str]

OK = Ok()


def _default_describe(code: int) -> str:
    return f"VIX error {code}"


def translate(
    code: int,
    tolerated: Collection[int] = (),
    *,
    describe: Describe | None = None,
) -> Outcome:
    """Classify a native result code.

    Args:
        code: Result code reported by the surface.
        tolerated: Codes the caller treats as a normal, empty outcome.
        describe: Resolves a code to text, usually bound to the surface's
            get_error_text() and the configured locale. Only called for
            tolerated and failed codes.
    """
    if code == constants.VIX_OK:
        return OK
    describe = describe or _default_describe
    if code in tolerated:
        return Tolerated(code, describe(code))
    return Failure(code, describe(code))


def check(
    code: int,
    tolerated: Collection[int] = (),
    *,
    describe: Describe | None = None,
) -> bool:
    """Raise OperationFailure for failed codes.

    Returns:
        True for VIX_OK, False for a tolerated code.
    """
    match translate(code, tolerated, describe=describe):
        case Ok():
            return True
        case Tolerated():
            return False
        case Failure() as failure:
            raise failure.to_exception()
    raise AssertionError("unreachable")
