import pytest

from specialresource.slice import contains, find, find_cr_file, insert


def test_find_present():
    assert find(["a", "b", "c"], "b") == 1


def test_find_returns_first_match():
    assert find(["x", "y", "x"], "x") == 0


def test_find_absent_returns_length():
    items = ["a", "b", "c"]
    assert find(items, "z") == len(items)


def test_find_empty():
    assert find([], "a") == 0


def test_contains():
    assert contains(["a", "b"], "b") is True
    assert contains(["a", "b"], "c") is False


def test_find_cr_file():
    names = ["other.yaml", "simple-kmod.yaml", "simple-kmod.yml"]
    assert find_cr_file(names, "simple-kmod") == 1


def test_find_cr_file_missing():
    assert find_cr_file(["simple-kmod.yml"], "simple-kmod") == -1


def test_insert_middle_does_not_mutate():
    items = ["a", "c"]
    result = insert(items, 1, "b")
    assert result == ["a", "b", "c"]
    assert items == ["a", "c"]


def test_insert_at_end_appends():
    assert insert(["a"], 1, "b") == ["a", "b"]


def test_insert_into_empty():
    assert insert([], 0, "a") == ["a"]


@pytest.mark.parametrize("index", [-1, 3])
def test_insert_out_of_range(index):
    with pytest.raises(IndexError):
        insert(["a", "b"], index, "x")


def test_repeated_insert_before_service():
    order = ["Namespace", "Secret", "Service", "Pod"]
    idx = find(order, "Service")
    added = ["BuildConfig", "ImageStream", "SecurityContextConstraints", "Issuer", "Certificates"]
    for kind in added:
        order = insert(order, idx, kind)
    assert order[idx:idx + len(added)] == list(reversed(added))
    assert order[idx + len(added)] == "Service"