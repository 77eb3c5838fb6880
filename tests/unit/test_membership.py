"""
Unit tests for membership functions

Tests Trapezoid, Triangle and membership_from_spec
"""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

import pytest
import numpy as np

from src.fuzzy.membership import Trapezoid, Triangle, membership_from_spec
from src.fuzzy.errors import ConfigurationError


class TestTrapezoid:
    """Test trapezoidal membership"""

    def test_outside_support_is_zero(self):
        """Test values at or beyond the feet"""
        mf = Trapezoid(0.0, 2.0, 4.0, 6.0)
        for x in (-10.0, 0.0, 6.0, 6.5, 100.0):
            assert mf.evaluate(x) == 0.0, f"{x} should have membership 0.0"

    def test_flat_top(self):
        """Test plateau between b and c"""
        mf = Trapezoid(0.0, 2.0, 4.0, 6.0)
        for x in np.linspace(2.0, 4.0, 11):
            assert mf.evaluate(float(x)) == 1.0, f"{x} should be on the plateau"

    def test_ramps(self):
        """Test linear rising and falling edges"""
        mf = Trapezoid(0.0, 2.0, 4.0, 6.0)
        assert mf.evaluate(1.0) == pytest.approx(0.5)
        assert mf.evaluate(0.5) == pytest.approx(0.25)
        assert mf.evaluate(5.0) == pytest.approx(0.5)
        assert mf.evaluate(5.5) == pytest.approx(0.25)

    def test_left_shoulder(self):
        """Test a == b treats the missing rising ramp as 1"""
        mf = Trapezoid(20.0, 20.0, 22.0, 23.5)
        assert mf.evaluate(20.001) == 1.0
        assert mf.evaluate(22.75) == pytest.approx(0.5)
        assert mf.evaluate(20.0) == 0.0, "x == a is outside the open support"

    def test_right_shoulder(self):
        """Test c == d treats the missing falling ramp as 1"""
        mf = Trapezoid(25.0, 26.5, 28.0, 28.0)
        assert mf.evaluate(27.999) == 1.0
        assert mf.evaluate(25.75) == pytest.approx(0.5)
        assert mf.evaluate(28.0) == 0.0

    def test_range_is_unit_interval(self):
        """Test every value lies in [0, 1]"""
        mf = Trapezoid(-1.0, 0.5, 0.7, 3.0)
        values = [mf.evaluate(float(x)) for x in np.linspace(-5, 5, 201)]
        assert min(values) >= 0.0
        assert max(values) <= 1.0

    def test_callable_and_support(self):
        """Test __call__ and support()"""
        mf = Trapezoid(0.0, 2.0, 4.0, 6.0)
        assert mf(3.0) == mf.evaluate(3.0)
        assert mf.support() == (0.0, 6.0)
        assert mf.params() == (0.0, 2.0, 4.0, 6.0)

    def test_unordered_params_rejected(self):
        """Test parameter order is enforced at construction"""
        with pytest.raises(ConfigurationError):
            Trapezoid(0.0, 3.0, 2.0, 6.0)

    def test_non_finite_params_rejected(self):
        """Test NaN parameters are rejected"""
        with pytest.raises(ConfigurationError):
            Trapezoid(0.0, float("nan"), 2.0, 6.0)


class TestTriangle:
    """Test triangular membership"""

    def test_peak(self):
        """Test exact peak"""
        mf = Triangle(19.0, 20.0, 21.0)
        assert mf.evaluate(20.0) == 1.0

    def test_edges(self):
        """Test feet and ramps"""
        mf = Triangle(0.0, 1.0, 3.0)
        assert mf.evaluate(0.0) == 0.0
        assert mf.evaluate(3.0) == 0.0
        assert mf.evaluate(0.5) == pytest.approx(0.5)
        assert mf.evaluate(2.0) == pytest.approx(0.5)

    def test_monotonic_on_each_side(self):
        """Test increase on (a, b) and decrease on (b, c)"""
        mf = Triangle(70.0, 78.0, 85.0)
        rising = [mf.evaluate(float(x)) for x in np.linspace(70.1, 77.9, 40)]
        falling = [mf.evaluate(float(x)) for x in np.linspace(78.1, 84.9, 40)]
        assert all(a <= b for a, b in zip(rising, rising[1:]))
        assert all(a >= b for a, b in zip(falling, falling[1:]))

    def test_known_degree(self):
        """Test a degree used by the Malang calibration"""
        assert Triangle(70.0, 78.0, 85.0).evaluate(75.2) == pytest.approx(0.65)

    def test_unordered_params_rejected(self):
        """Test peak outside the feet is rejected"""
        with pytest.raises(ConfigurationError):
            Triangle(0.0, 5.0, 3.0)


class TestMembershipFromSpec:
    """Test building membership functions from descriptions"""

    def test_trapezoid(self):
        """Test trapezoid description"""
        mf = membership_from_spec("trapezoid", [0, 1, 2, 3])
        assert isinstance(mf, Trapezoid)
        assert mf.kind == "trapezoid"

    def test_aliases(self):
        """Test short aliases"""
        assert isinstance(membership_from_spec("trimf", [0, 1, 2]), Triangle)
        assert isinstance(membership_from_spec("TRAP", [0, 1, 2, 3]), Trapezoid)

    def test_unknown_kind(self):
        """Test unknown kinds are rejected"""
        with pytest.raises(ConfigurationError, match="Unknown membership function"):
            membership_from_spec("gaussian", [0, 1])

    def test_wrong_arity(self):
        """Test parameter count must match the shape"""
        with pytest.raises(ConfigurationError, match="expects 3 parameters"):
            membership_from_spec("triangle", [0, 1, 2, 3])
