"""Tests for the lazily loaded snapshot tree."""

import gc

import pytest

from tests.fake_surface import VM_HANDLE, FakeSnapshot, FakeSurface
from vixlib import VirtualMachine, constants
from vixlib.exceptions import OperationFailure
from vixlib.models import Operation, PowerState
from vixlib.snapshot import RootSnapshotCollection, Snapshot, join_snapshot_path


@pytest.fixture
def tree(surface: FakeSurface) -> dict[str, FakeSnapshot]:
    """Two top-level trees.

    Base (VM base state)      Clean
    └── A                     ├── Patched
        └── B                 │   └── Tools
                              └── Broken
    """
    base = surface.add_snapshot("Base", is_base=True)
    a = surface.add_snapshot("A", base)
    b = surface.add_snapshot("B", a)
    clean = surface.add_snapshot("Clean", description="fresh install", power_state=0x0002)
    patched = surface.add_snapshot("Patched", clean)
    tools = surface.add_snapshot("Tools", patched)
    broken = surface.add_snapshot("Broken", clean)
    return {
        "Base": base,
        "A": a,
        "B": b,
        "Clean": clean,
        "Patched": patched,
        "Tools": tools,
        "Broken": broken,
    }


# ============================================================================
# Path
# ============================================================================


class TestSnapshotPath:
    """Tests for Snapshot.path and its two "no ancestor" cases."""

    def test_base_state_path_is_empty(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        """INVALID_ARG from the parent query means the VM base state."""
        assert Snapshot(vm, tree["Base"]).path == ""

    def test_child_of_base_state(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        assert Snapshot(vm, tree["A"]).path == "A"
        assert Snapshot(vm, tree["B"]).path == "A/B"

    def test_top_level_snapshot_is_own_name(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        """SNAPSHOT_NOTFOUND from the parent query means a top-level snapshot."""
        assert Snapshot(vm, tree["Clean"]).path == "Clean"
        assert Snapshot(vm, tree["Tools"]).path == "Clean/Patched/Tools"

    def test_other_parent_code_raises(
        self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(surface, "get_parent", lambda snapshot: (constants.VIX_E_INVALID_HANDLE, None))
        with pytest.raises(OperationFailure) as exc_info:
            _ = Snapshot(vm, tree["A"]).path
        assert exc_info.value.code == constants.VIX_E_INVALID_HANDLE

    def test_join_snapshot_path(self) -> None:
        assert join_snapshot_path("", "A") == "A"
        assert join_snapshot_path("A", "B") == "A/B"


# ============================================================================
# Properties and children
# ============================================================================


class TestSnapshotTree:
    """Tests for lazy children and cached tree structure."""

    def test_properties(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        clean = Snapshot(vm, tree["Clean"])
        assert clean.display_name == "Clean"
        assert clean.description == "fresh install"
        assert clean.power_state == PowerState.POWERED_OFF

    def test_children_fetched_on_first_access(
        self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Children are not queried until read, and only once."""
        queried: list[FakeSnapshot] = []
        original = surface.get_child_count

        def counting(snapshot: FakeSnapshot) -> tuple[int, int]:
            queried.append(snapshot)
            return original(snapshot)

        monkeypatch.setattr(surface, "get_child_count", counting)

        clean = Snapshot(vm, tree["Clean"])
        assert queried == []

        first = clean.children
        second = clean.children

        assert first is second
        assert queried == [tree["Clean"]]
        assert [child.display_name for child in first] == ["Patched", "Broken"]

    def test_child_parent_is_weak(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        """A child does not keep its parent alive."""
        clean = Snapshot(vm, tree["Clean"])
        child = clean.children[0]
        assert child.parent is clean

        del clean
        gc.collect()

        assert child.parent is None

    def test_root_collection_is_lazy(
        self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]
    ) -> None:
        assert isinstance(vm.snapshots, RootSnapshotCollection)
        assert len(vm.snapshots) == 2
        assert [s.display_name for s in vm.snapshots] == ["Base", "Clean"]
        assert vm.snapshots[0].parent is None

    def test_walk_is_depth_first(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        names = [snapshot.display_name for snapshot in vm.snapshots.walk()]
        assert names == ["Base", "A", "B", "Clean", "Patched", "Tools", "Broken"]

    def test_contains_is_identity(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        root = vm.snapshots[1]
        assert root in vm.snapshots
        assert Snapshot(vm, tree["Clean"]) not in vm.snapshots


# ============================================================================
# Lookup
# ============================================================================


class TestSnapshotLookup:
    """Tests for name, path and current-snapshot lookup."""

    def test_get_named_snapshot(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        snapshot = vm.snapshots.get_named_snapshot("Tools")
        assert snapshot is not None
        assert snapshot.handle is tree["Tools"]

    def test_get_named_snapshot_missing(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        assert vm.snapshots.get_named_snapshot("Nope") is None

    def test_find_snapshot_by_path(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        snapshot = vm.snapshots.find_snapshot("Clean/Patched/Tools")
        assert snapshot is not None
        assert snapshot.handle is tree["Tools"]

    def test_find_snapshot_missing_segment(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        assert vm.snapshots.find_snapshot("Clean/Nope") is None

    def test_collection_get_named(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        clean = vm.snapshots.get_named("Clean")
        assert clean is not None
        assert clean.children.get_named("Broken") is not None
        assert clean.children.get_named("Tools") is None

    def test_current_snapshot(self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]) -> None:
        assert vm.snapshots.current_snapshot is None
        surface.current = tree["Patched"]
        current = vm.snapshots.current_snapshot
        assert current is not None
        assert current.display_name == "Patched"


# ============================================================================
# Operations
# ============================================================================


class TestSnapshotOperations:
    """Tests for revert, remove and create."""

    def test_revert(self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]) -> None:
        """Revert submits against the VM with the snapshot and options."""
        snapshot = vm.snapshots.find_snapshot("Clean/Broken")
        assert snapshot is not None

        snapshot.revert(constants.VIX_VMPOWEROP_LAUNCH_GUI)

        (job,) = surface.jobs_for(Operation.REVERT_TO_SNAPSHOT)
        assert job.target == VM_HANDLE
        assert job.args == (tree["Broken"], constants.VIX_VMPOWEROP_LAUNCH_GUI)
        assert surface.current is tree["Broken"]

    def test_revert_does_not_touch_tree(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        clean = vm.snapshots.get_named("Clean")
        assert clean is not None
        children = clean.children
        clean.children[0].revert()
        assert clean.children is children
        assert len(children) == 2

    async def test_revert_async(self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]) -> None:
        await Snapshot(vm, tree["A"]).revert_async()
        assert surface.current is tree["A"]

    def test_revert_failure(self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]) -> None:
        surface.on(Operation.REVERT_TO_SNAPSHOT, error=constants.VIX_E_SNAPSHOT_INVAL)
        with pytest.raises(OperationFailure):
            Snapshot(vm, tree["A"]).revert()

    def test_remove_evicts_from_parent(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        """After remove() the parent's children exclude the removed node."""
        clean = vm.snapshots.get_named("Clean")
        assert clean is not None
        broken = clean.children.get_named("Broken")
        assert broken is not None

        broken.remove()

        assert broken not in clean.children
        assert [child.display_name for child in clean.children] == ["Patched"]
        assert broken.parent is None

    def test_remove_clears_child_back_references(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        patched = vm.snapshots.find_snapshot("Clean/Patched")
        assert patched is not None
        tools = patched.children[0]

        patched.remove()

        assert tools.parent is None

    def test_fresh_children_exclude_removed(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        clean = vm.snapshots.get_named("Clean")
        assert clean is not None
        broken = clean.children.get_named("Broken")
        assert broken is not None

        broken.remove()
        clean.invalidate()

        assert "Broken" not in [child.display_name for child in clean.children]

    def test_remove_root_evicts_from_roots(self, vm: VirtualMachine, tree: dict[str, FakeSnapshot]) -> None:
        base = vm.snapshots.get_named("Base")
        assert base is not None

        vm.snapshots.remove_snapshot(base)

        assert base not in vm.snapshots
        assert [s.display_name for s in vm.snapshots] == ["Clean"]

    def test_remove_detached_invalidates_roots(
        self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]
    ) -> None:
        """Removing a snapshot found outside the cached tree reloads the tree."""
        assert len(vm.snapshots) == 2
        detached = vm.snapshots.get_named_snapshot("Base")
        assert detached is not None

        detached.remove()

        # Native re-parenting promoted "A" to the top level
        assert [s.display_name for s in vm.snapshots] == ["A", "Clean"]

    def test_remove_failure_keeps_cache(
        self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]
    ) -> None:
        surface.on(Operation.REMOVE_SNAPSHOT, error=constants.VIX_E_OBJECT_IS_BUSY)
        clean = vm.snapshots.get_named("Clean")
        assert clean is not None
        broken = clean.children[1]

        with pytest.raises(OperationFailure):
            broken.remove()

        assert broken in clean.children
        assert broken.parent is clean

    def test_create_snapshot(self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]) -> None:
        """create_snapshot() returns the new node and drops the cached tree."""
        assert len(vm.snapshots) == 2

        created = vm.snapshots.create_snapshot("Nightly", "before upgrade")

        (job,) = surface.jobs_for(Operation.CREATE_SNAPSHOT)
        assert job.args == ("Nightly", "before upgrade", constants.VIX_SNAPSHOT_INCLUDE_MEMORY)
        assert created.display_name == "Nightly"
        assert created.description == "before upgrade"
        assert len(vm.snapshots) == 3

    def test_create_snapshot_under_current(
        self, vm: VirtualMachine, surface: FakeSurface, tree: dict[str, FakeSnapshot]
    ) -> None:
        surface.current = tree["Tools"]
        created = vm.snapshots.create_snapshot("Deployed")
        assert created.path == "Clean/Patched/Tools/Deployed"
