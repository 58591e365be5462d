"""
This module contains unit tests for the linear thermal network classes.
"""
import unittest

import numpy as np

from ctf_calc.thermal_models import (
    Resistor,
    Capacitor,
    ConnectionSide,
    TemperatureNode,
    HeatFlowOutput,
    LinearThermalNetwork
)


class Test_Resistor(unittest.TestCase):
    """ Unit tests for Resistor class """

    def test_series(self):
        self.assertEqual((Resistor(1.0) + Resistor(2.0)).value, 3.0)
        self.assertEqual(sum([Resistor(1.0), Resistor(0.5), Resistor(0.25)]).value, 1.75)

    def test_parallel(self):
        self.assertAlmostEqual((Resistor(2.0) // Resistor(2.0)).value, 1.0)

    def test_invalid_addition(self):
        with self.assertRaises(NotImplementedError):
            1.5 + Resistor(1.0)


class Test_LinearThermalNetwork(unittest.TestCase):
    """ Unit tests for a two-node network between two external temperatures:
    T_a -- R1 -- N1 -- R2 -- N2 -- R3 -- T_b
    """

    def setUp(self):
        self.n1 = TemperatureNode('N1', 'test', Capacitor(2.0))
        self.n2 = TemperatureNode('N2', 'test', Capacitor(4.0))
        self.n1.connect_resistor('T_a', Resistor(0.5), ConnectionSide.IN)
        self.n1.connect_resistor(self.n2, Resistor(1.0), ConnectionSide.OUT)
        self.n2.connect_resistor(self.n1, Resistor(1.0), ConnectionSide.IN)
        self.n2.connect_resistor('T_b', Resistor(0.25), ConnectionSide.OUT)
        self.network = LinearThermalNetwork('test', (self.n1, self.n2))

    def test_equation(self):
        states, inputs = self.n1.equation()
        self.assertAlmostEqual(states['N1'], -(2.0 + 1.0) / 2.0)
        self.assertAlmostEqual(states['N2'], 1.0 / 2.0)
        self.assertAlmostEqual(inputs['T_a'], 2.0 / 2.0)

    def test_matrices(self):
        outputs = [
            HeatFlowOutput('q_a', self.n1, 'T_a', into_node=True),
            HeatFlowOutput('q_b', self.n2, 'T_b', into_node=False)
        ]
        A, B, C, D = self.network.create_matrices(outputs)
        np.testing.assert_allclose(A, [[-1.5, 0.5], [0.25, -1.25]])
        np.testing.assert_allclose(B, [[1.0, 0.0], [0.0, 1.0]])
        np.testing.assert_allclose(C, [[-2.0, 0.0], [0.0, 4.0]])
        np.testing.assert_allclose(D, [[2.0, 0.0], [0.0, -4.0]])
        self.assertEqual(self.network.inputs, ('T_a', 'T_b'))
        self.assertEqual(self.network.states, ('N1', 'N2'))
        self.assertEqual(self.network.outputs, ('q_a', 'q_b'))

    def test_get_resistor(self):
        self.assertEqual(self.n1.get_resistor('T_a').value, 0.5)
        with self.assertRaises(KeyError):
            self.n1.get_resistor('T_b')


if __name__ == '__main__':
    unittest.main()
