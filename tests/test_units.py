"""
This module contains unit tests for the conversion of layer properties and
CTF coefficients between SI and the unit system of the state-space model.
"""
import unittest

import numpy as np

from ctf_calc import Quantity
from ctf_calc.ctf import CTFCoefficientSet
from ctf_calc.thermal_models import UnitSystem, UnitNormalizer
from tests.common import concrete, insulation, air_gap

Q_ = Quantity


class Test_UnitNormalizer(unittest.TestCase):
    """ Unit tests for UnitNormalizer class """

    def setUp(self):
        self.layers = [concrete(), air_gap(), insulation()]
        self.normalizer = UnitNormalizer()

    def test_default_is_english(self):
        self.assertEqual(self.normalizer.unit_system, UnitSystem.english())

    def test_normalize(self):
        """ Test the conversion of SI properties to inch-pound units """
        conc, gap, ins = self.normalizer.normalize(self.layers)
        np.testing.assert_allclose(conc.t, 0.656168, rtol=1.0e-5)
        np.testing.assert_allclose(conc.k, 1.126689, rtol=1.0e-4)
        np.testing.assert_allclose(conc.rho, 139.8389, rtol=1.0e-4)
        np.testing.assert_allclose(conc.c, 0.214961, rtol=1.0e-4)
        self.assertIsNone(conc.R)
        self.assertTrue(gap.is_no_mass)
        np.testing.assert_allclose(gap.R, 0.18 * 5.678263, rtol=1.0e-5)
        self.assertEqual(gap.heat_capacity, 0.0)
        self.assertFalse(ins.is_no_mass)

    def test_round_trip(self):
        """ Test that denormalize undoes normalize """
        for unit_system in (UnitSystem.english(), UnitSystem.si()):
            normalizer = UnitNormalizer(unit_system)
            layers = normalizer.denormalize(normalizer.normalize(self.layers))
            for original, restored in zip(self.layers, layers):
                with self.subTest(unit_system=unit_system, layer=original.name):
                    self.assertEqual(original.name, restored.name)
                    self.assertEqual(original.is_no_mass, restored.is_no_mass)
                    np.testing.assert_allclose(
                        restored.resistance.to('m ** 2 * K / W').m,
                        original.resistance.m,
                        rtol=1.0e-12
                    )
                    if not original.is_no_mass:
                        for name in ('t', 'k', 'rho', 'c'):
                            np.testing.assert_allclose(
                                getattr(restored, name).to(getattr(original, name).units).m,
                                getattr(original, name).m,
                                rtol=1.0e-12
                            )

    def test_conductance_factor(self):
        np.testing.assert_allclose(self.normalizer.conductance_factor(), 5.678263, rtol=1.0e-6)
        self.assertAlmostEqual(UnitNormalizer(UnitSystem.si()).conductance_factor(), 1.0)

    def test_time_step(self):
        self.assertAlmostEqual(self.normalizer.time_step(Q_(15, 'min')), 0.25)
        self.assertAlmostEqual(UnitNormalizer(UnitSystem.si()).time_step(Q_(1, 'hr')), 3600.0)

    def test_denormalize_ctf(self):
        """ Test that only the conductance coefficients are scaled """
        raw = CTFCoefficientSet(
            time_step=1.0,
            outside=[0.5, -0.3],
            cross=[0.05, 0.05],
            inside=[0.4, -0.2],
            flux=[0.6]
        )
        ctf = self.normalizer.denormalize(raw)
        f = self.normalizer.conductance_factor()
        np.testing.assert_allclose(ctf.outside, [0.5 * f, -0.3 * f])
        np.testing.assert_allclose(ctf.cross, [0.05 * f, 0.05 * f])
        np.testing.assert_allclose(ctf.inside, [0.4 * f, -0.2 * f])
        np.testing.assert_allclose(ctf.flux, [0.6])
        self.assertEqual(ctf.time_step, 1.0)


if __name__ == '__main__':
    unittest.main()
