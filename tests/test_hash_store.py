import pytest

from wiifc.hash_store import (
    HashesByRegion,
    HashStore,
    HashStoreError,
    PackIDMissingError,
    Region,
    VersionMissingError,
    flatten_blank,
)


@pytest.fixture
def store():
    s = HashStore()
    s.load([(1, 2, "aaa", "bbb", "ccc", "ddd"), (1, 3, "eee", " " * 40, "", "fff")])
    return s


def test_flatten_blank():
    assert flatten_blank(" " * 40) == ""
    assert flatten_blank("\t\n ") == ""
    assert flatten_blank(" abc ") == " abc "
    assert flatten_blank("") == ""


def test_for_region():
    entry = HashesByRegion(ntscu="u", ntscj="j", ntsck="k", pal="p")
    assert [entry.for_region(r) for r in Region] == ["u", "j", "k", "p"]
    assert entry.for_region(7) == ""


def test_validate(store):
    assert store.validate(1, 2, Region.PAL, "ddd")
    assert store.validate(1, 2, Region.NTSCU, "aaa")
    assert not store.validate(1, 2, Region.PAL, "aaa")
    assert not store.validate(9, 2, Region.PAL, "ddd")
    assert not store.validate(1, 9, Region.PAL, "ddd")


def test_blank_hash_never_validates(store):
    assert not store.validate(1, 3, Region.NTSCJ, "")
    assert not store.validate(1, 3, Region.NTSCJ, " " * 40)
    assert store.snapshot()[1][3].ntscj == ""


def test_update_replaces_entry(store):
    store.update(1, 2, "new", "", "", "")
    assert store.validate(1, 2, Region.NTSCU, "new")
    assert not store.validate(1, 2, Region.PAL, "ddd")
    store.update(5, 1, "x", "y", "z", "w")
    assert store.snapshot()[5][1] == HashesByRegion("x", "y", "z", "w")


def test_remove(store):
    store.remove(1, 2)
    assert not store.validate(1, 2, Region.PAL, "ddd")
    assert 2 not in store.snapshot()[1]


def test_remove_missing_pack(store):
    with pytest.raises(PackIDMissingError):
        store.remove(42, 2)


def test_remove_missing_version(store):
    with pytest.raises(VersionMissingError):
        store.remove(1, 42)


def test_removed_pack_stays_known(store):
    store.remove(1, 2)
    store.remove(1, 3)
    assert store.snapshot() == {1: {}}
    with pytest.raises(VersionMissingError):
        store.remove(1, 2)


@pytest.mark.parametrize("pack_id, version", [(42, 2), (1, 42)])
def test_remove_errors_share_base(store, pack_id, version):
    with pytest.raises(HashStoreError):
        store.remove(pack_id, version)
    with pytest.raises(LookupError):
        store.remove(pack_id, version)
    assert store.validate(1, 2, Region.PAL, "ddd")


def test_snapshot_is_independent(store):
    snap = store.snapshot()
    snap[1].clear()
    snap[7] = {}
    assert store.validate(1, 2, Region.NTSCK, "ccc")
    assert 7 not in store.snapshot()