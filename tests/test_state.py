import pytest

from specialresource.state import generate_name


def test_generate_name_from_template_path():
    name = generate_name("templates/0000-buildconfig.yaml", "simple-kmod")
    assert name == "specialresource.openshift.io/state-simple-kmod-0000"


def test_generate_name_uses_base_name_only():
    name = generate_name("a/b/1234-x.yaml", "sr")
    assert name.endswith("sr-1234")
    assert "a/b" not in name


def test_generate_name_trailing_slash():
    assert generate_name("dir/5678-state/", "sr") == generate_name("5678-state", "sr")


def test_generate_name_short_raises():
    with pytest.raises(ValueError):
        generate_name("templates/ab", "sr")