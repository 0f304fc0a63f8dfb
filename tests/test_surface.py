"""Tests for the surface protocol and opener loading."""

import pytest

from tests import fake_surface
from tests.fake_surface import FakeSurface
from vixlib.completion import JobCallback as CompletionCallback
from vixlib.exceptions import SurfaceLoadError
from vixlib.surface import AutomationSurface, JobCallback, load_opener


class TestProtocols:
    def test_fake_surface_satisfies_protocol(self) -> None:
        assert isinstance(FakeSurface(), AutomationSurface)

    def test_completion_callback_satisfies_protocol(self) -> None:
        assert isinstance(CompletionCallback(), JobCallback)


class TestLoadOpener:
    """Tests for load_opener()."""

    def test_loads_callable(self) -> None:
        assert load_opener("tests.fake_surface:open_vm") is fake_surface.open_vm

    @pytest.mark.parametrize("path", ["tests.fake_surface", "tests.fake_surface:", ":open_vm", ""])
    def test_malformed_path(self, path: str) -> None:
        with pytest.raises(SurfaceLoadError, match="Invalid opener path"):
            load_opener(path)

    def test_missing_module(self) -> None:
        with pytest.raises(SurfaceLoadError, match="Cannot import") as exc_info:
            load_opener("tests.no_such_module:open_vm")
        assert exc_info.value.context == {"opener": "tests.no_such_module:open_vm"}

    def test_missing_attribute(self) -> None:
        with pytest.raises(SurfaceLoadError, match="not a callable"):
            load_opener("tests.fake_surface:nope")

    def test_not_callable(self) -> None:
        with pytest.raises(SurfaceLoadError, match="not a callable"):
            load_opener("tests.fake_surface:VM_HANDLE")
