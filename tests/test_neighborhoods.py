"""Tests for nycprop.neighborhoods — adjacency table."""

from nycprop.neighborhoods import (
    ADJACENCY,
    adjacent_neighborhoods,
    compatible_neighborhoods,
    is_adjacent_neighborhood,
    is_same_neighborhood,
)


def test_adjacency_is_symmetric():
    for name, neighbors in ADJACENCY.items():
        for other in neighbors:
            assert name in ADJACENCY[other], f"{other} missing back-link to {name}"


def test_no_self_adjacency():
    for name, neighbors in ADJACENCY.items():
        assert name not in neighbors


def test_adjacent_neighborhoods():
    neighbors = adjacent_neighborhoods("east village")
    assert "LOWER EAST SIDE" in neighbors
    assert "ALPHABET CITY" in neighbors
    assert neighbors == sorted(neighbors)
    assert adjacent_neighborhoods("NOWHERE") == []


def test_compatible_neighborhoods_puts_own_label_first():
    labels = compatible_neighborhoods("East Village")
    assert labels[0] == "EAST VILLAGE"
    assert "LOWER EAST SIDE" in labels


def test_compatible_without_adjacent():
    assert compatible_neighborhoods("EAST VILLAGE", include_adjacent=False) == ["EAST VILLAGE"]


def test_unknown_label_compatible_with_itself_only():
    assert compatible_neighborhoods("NOWHERE") == ["NOWHERE"]


def test_same_neighborhood_is_substring_either_way():
    assert is_same_neighborhood("UPPER WEST SIDE (79-96)", "UPPER WEST SIDE (79-96)")
    assert is_same_neighborhood("HARLEM", "HARLEM-CENTRAL")
    assert not is_same_neighborhood("CHELSEA", "SOHO")
    assert not is_same_neighborhood("", "SOHO")


def test_adjacent_neighborhood():
    assert is_adjacent_neighborhood("EAST VILLAGE", "LOWER EAST SIDE")
    assert not is_adjacent_neighborhood("EAST VILLAGE", "EAST VILLAGE")
    assert not is_adjacent_neighborhood("EAST VILLAGE", "RIVERDALE")
    assert not is_adjacent_neighborhood("EAST VILLAGE", "")
