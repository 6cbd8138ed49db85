"""Unit tests for PageSelection."""
import sys
sys.path.insert(0, 'backend')

from models.selection import PageSelection


def test_toggle_adds_then_removes():
    selection = PageSelection()

    assert selection.toggle(3) is True
    assert 3 in selection
    assert selection.toggle(3) is False
    assert 3 not in selection


def test_toggle_twice_leaves_other_indices_untouched():
    selection = PageSelection([1, 4])

    selection.toggle(2)
    selection.toggle(2)

    assert selection.sorted_indices() == [1, 4]


def test_select_all_then_again_clears():
    """Test the select-all / deselect-all control round trip."""
    selection = PageSelection([1])

    selection.select_all(4)
    assert selection.sorted_indices() == [0, 1, 2, 3]

    selection.select_all(4)
    assert len(selection) == 0


def test_clear():
    selection = PageSelection([0, 1, 2])
    selection.clear()
    assert selection.sorted_indices() == []


def test_replace_overrides_membership():
    selection = PageSelection([0, 1])

    selection.replace([5, 2, 5])

    assert selection.sorted_indices() == [2, 5]
    assert not selection.contains(0)


def test_no_bounds_validation_on_mutation():
    selection = PageSelection()
    selection.toggle(99)
    assert selection.sorted_indices() == [99]


def test_sorted_indices_ascending():
    selection = PageSelection([7, 0, 3])
    assert selection.sorted_indices() == [0, 3, 7]
