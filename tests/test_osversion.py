import pytest

from specialresource.osversion import render_operating_system


def test_rhcos_46_matches_documented_example():
    assert render_operating_system("rhcos", "4", "6")[2] == "8.2"


def test_rhcos_44_maps_to_rhel_81():
    assert render_operating_system("rhcos", "4", "4")[2] == "8.1"


def test_rhcos_48_maps_to_rhel_84():
    assert render_operating_system("rhcos", "4", "8")[2] == "8.4"


@pytest.mark.parametrize("minor", ["1", "2", "3", "4", "5", "6", "7", "8"])
def test_rhcos_results_are_consistent(minor):
    name_major, name_full, version = render_operating_system("rhcos", "4", minor)
    major, rhel_minor = version.split(".")
    assert name_major == "rhel" + major
    assert name_full == name_major + "." + rhel_minor


def test_rhcos_minor_mapping_is_monotonic():
    minors = [
        int(render_operating_system("rhcos", "4", m)[2].split(".")[1])
        for m in ["1", "2", "3", "4", "5", "6", "7", "8"]
    ]
    assert minors == sorted(minors)


def test_rhcos_unknown_minor_gives_empty_minor():
    _, _, version = render_operating_system("rhcos", "4", "9")
    assert version.endswith(".")


def test_non_rhcos_without_minor():
    assert render_operating_system("fedora", "34", "") == ("fedora34", "fedora34", "34")


def test_non_rhcos_with_minor():
    rel, maj, mn = "rhel", "8", "3"
    assert render_operating_system(rel, maj, mn) == (rel + maj, rel + maj + "." + mn, maj + "." + mn)


def test_rhcos_other_major_is_not_translated():
    result = render_operating_system("rhcos", "5", "1")
    assert result == ("rhcos5", "rhcos5.1", "5.1")