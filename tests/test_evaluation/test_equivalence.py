"""
Tests for class equivalence groups.
"""

import pytest

from gt_audit.core.errors import ConfigError
from gt_audit.evaluation.equivalence import ClassEquivalenceResolver


class TestClassEquivalenceResolver:
    """Test ClassEquivalenceResolver."""

    def test_no_groups_is_exact_match(self):
        """Test without groups classes only equal themselves."""
        resolver = ClassEquivalenceResolver()
        assert resolver.same_class("car", "car")
        assert not resolver.same_class("car", "Car")
        assert resolver.canonical("truck") == "truck"

    def test_grouped_classes_are_equivalent(self):
        """Test members of a group share the first member as canonical id."""
        resolver = ClassEquivalenceResolver([["car", "automobile", "vehicle"]])
        assert resolver.canonical("automobile") == "car"
        assert resolver.same_class("vehicle", "automobile")
        assert resolver("car", "vehicle")
        assert not resolver.same_class("car", "truck")

    def test_separate_groups_stay_separate(self):
        """Test classes in different groups are not equivalent."""
        resolver = ClassEquivalenceResolver([["car", "automobile"], ["person", "pedestrian"]])
        assert not resolver.same_class("car", "person")
        assert resolver.groups == (("car", "automobile"), ("person", "pedestrian"))

    def test_ignore_case(self):
        """Test case folding."""
        resolver = ClassEquivalenceResolver([["Car", "automobile"]], ignore_case=True)
        assert resolver.same_class("CAR", "Automobile")
        assert resolver.same_class("truck", "TRUCK")

    def test_duplicate_within_group_is_allowed(self):
        """Test repeating a class in one group is harmless."""
        resolver = ClassEquivalenceResolver([["car", "car", "auto"]])
        assert resolver.groups == (("car", "auto"),)

    def test_class_in_two_groups(self):
        """Test overlapping groups are rejected."""
        with pytest.raises(ConfigError, match="more than one class group"):
            ClassEquivalenceResolver([["car", "automobile"], ["automobile", "vehicle"]])

    def test_same_singleton_group_twice(self):
        """Test a class listed alone in two groups is still ambiguous."""
        with pytest.raises(ConfigError, match="more than one class group"):
            ClassEquivalenceResolver([["car"], ["car"]])

    def test_case_collision_with_ignore_case(self):
        """Test groups that collide only after case folding are rejected."""
        with pytest.raises(ConfigError):
            ClassEquivalenceResolver([["Car"], ["car", "auto"]], ignore_case=True)

    @pytest.mark.parametrize("groups", [["car"], [[]], [["car", ""]], [["car", 3]]])
    def test_malformed_groups(self, groups):
        """Test malformed group definitions."""
        with pytest.raises(ConfigError):
            ClassEquivalenceResolver(groups)
