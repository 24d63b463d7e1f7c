"""Operating-system version rendering from node feature labels."""

from __future__ import annotations


def _rhcos_to_rhel_minor(min_: str) -> str:
    """Map an RHCOS 4.x minor version to the RHEL 8 minor it is based on.

    The comparison is lexicographic on strings, as the labels are strings.
    An unknown minor yields an empty string.
    """
    if min_ <= "3":
        return "0"
    if min_ == "4":
        return "1"
    if min_ <= "6":
        return "2"
    if min_ <= "7":
        return "3"
    if min_ <= "8":
        return "4"
    return ""


def render_operating_system(rel: str, maj: str, min_: str) -> tuple[str, str, str]:
    """Return the OS version as ``<name><major>``, ``<name><major>.<minor>`` and ``<major>.<minor>``.

    For RHCOS 4 nodes the RHEL version the release is based on is returned.
    Without a minor version the minor part is left out.
    """
    if rel == "rhcos" and maj == "4":
        rhel_maj = "8"
        rhel_min = _rhcos_to_rhel_minor(min_)
        return (
            f"rhel{rhel_maj}",
            f"rhel{rhel_maj}.{rhel_min}",
            f"{rhel_maj}.{rhel_min}",
        )
    if min_ == "":
        return rel + maj, rel + maj, maj
    return rel + maj, f"{rel}{maj}.{min_}", f"{maj}.{min_}"