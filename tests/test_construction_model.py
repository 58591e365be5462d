"""
This module contains unit tests for the discretization of a construction
into a linear thermal network and its state-space matrices.
"""
import unittest

import numpy as np
import control as ct

from ctf_calc import Quantity
from ctf_calc.construction import Construction
from ctf_calc.exceptions import DiscretizationError
from ctf_calc.thermal_models import (
    UnitNormalizer,
    UnitSystem,
    StateSpaceMatrices,
    create_nodal_grid,
    discretize
)
from tests.common import (
    concrete, insulation, gypsum, air_gap,
    concrete_wall, single_layer, no_mass_construction
)

Q_ = Quantity


class Test_NodalGrid(unittest.TestCase):
    """ Unit tests for the number of nodes per layer """

    def setUp(self):
        self.normalizer = UnitNormalizer()

    def test_nodes_per_layer(self):
        layers = self.normalizer.normalize([gypsum(), concrete(), air_gap(), insulation()])
        grid = create_nodal_grid(layers, dt=1.0)
        self.assertEqual(grid.nodes_per_layer, (1, 2, 0, 1))
        self.assertEqual(grid.total_nodes, 4)
        self.assertEqual(grid.layer_names, ('Gypsum board', 'Concrete', 'Air gap', 'Insulation'))

    def test_smaller_spacing_gives_more_nodes(self):
        layers = self.normalizer.normalize([concrete()])
        coarse = create_nodal_grid(layers, dt=1.0)
        fine = create_nodal_grid(layers, dt=1.0, node_spacing_factor=0.25)
        self.assertGreater(fine.total_nodes, coarse.total_nodes)
        self.assertEqual(fine.total_nodes, 9)

    def test_max_total_nodes(self):
        layers = self.normalizer.normalize([concrete(1.0), concrete(1.0, 'Concrete 2')])
        grid = create_nodal_grid(layers, dt=1.0, max_total_nodes=6)
        self.assertLessEqual(grid.total_nodes, 6)
        self.assertTrue(all(n >= 1 for n in grid.nodes_per_layer))

    def test_too_many_mass_layers(self):
        layers = self.normalizer.normalize([concrete(name=f'C{i}') for i in range(4)])
        with self.assertRaises(DiscretizationError):
            create_nodal_grid(layers, dt=1.0, max_total_nodes=3)


class Test_discretize(unittest.TestCase):
    """ Unit tests for the state-space matrices of a construction """

    def setUp(self):
        self.construction = concrete_wall()
        self.matrices = discretize(self.construction)

    def test_shapes(self):
        m = self.matrices
        self.assertIsInstance(m, StateSpaceMatrices)
        self.assertEqual(m.num_states, 4)
        self.assertEqual(m.A.shape, (4, 4))
        self.assertEqual(m.B.shape, (4, 2))
        self.assertEqual(m.C.shape, (2, 4))
        self.assertEqual(m.D.shape, (2, 2))
        self.assertEqual(m.input_names, ('T_out', 'T_in'))
        self.assertEqual(m.output_names, ('q_out', 'q_in'))

    def test_nodes_run_from_outside_to_inside(self):
        """ Test that the first state is the outermost node """
        self.assertEqual(
            self.matrices.state_names,
            ('Insulation[1]', 'Concrete[1]', 'Concrete[2]', 'Gypsum board[1]')
        )
        B = self.matrices.B
        self.assertGreater(B[0, 0], 0.0)
        self.assertEqual(B[0, 1], 0.0)
        self.assertGreater(B[-1, 1], 0.0)
        self.assertEqual(B[-1, 0], 0.0)

    def test_symmetric_conductance_matrix(self):
        m = self.matrices
        K = m.capacitances[:, None] * m.A
        np.testing.assert_allclose(K, K.T, rtol=1.0e-12)
        # tridiagonal
        self.assertTrue(np.all(np.triu(m.A, 2) == 0.0))
        self.assertTrue(np.all(np.tril(m.A, -2) == 0.0))

    def test_total_capacity(self):
        C_total = sum(layer.heat_capacity.to('Btu / (ft ** 2 * delta_degF)').m for layer in self.construction.layers)
        np.testing.assert_allclose(self.matrices.capacitances.sum(), C_total, rtol=1.0e-12)

    def test_conductance(self):
        U = self.construction.thermal_conductance.to('Btu / (hr * ft ** 2 * delta_degF)').m
        np.testing.assert_allclose(self.matrices.conductance, U, rtol=1.0e-12)

    def test_dc_gain(self):
        """ Test that the steady-state heat flows follow from the conductance """
        gain = np.real(np.asarray(ct.dcgain(self.matrices.system), dtype=complex))
        U = self.matrices.conductance
        np.testing.assert_allclose(gain, [[U, -U], [U, -U]], rtol=1.0e-9)

    def test_feedthrough_signs(self):
        D = self.matrices.D
        self.assertGreater(D[0, 0], 0.0)
        self.assertLess(D[1, 1], 0.0)
        self.assertEqual(D[0, 1], 0.0)
        self.assertEqual(D[1, 0], 0.0)

    def test_no_mass_layer_merged(self):
        """ Test that a no-mass layer only adds its resistance between two nodes """
        R_gap = 0.18
        without_gap = discretize(Construction.create('A', [concrete(), concrete(name='Concrete 2')]))
        with_gap = discretize(Construction.create('B', [concrete(), air_gap(R_gap), concrete(name='Concrete 2')]))
        self.assertEqual(with_gap.num_states, without_gap.num_states)
        i = without_gap.num_states // 2
        # conductance between the two nodes adjacent to the gap
        g_without = without_gap.capacitances[i - 1] * without_gap.A[i - 1, i]
        g_with = with_gap.capacitances[i - 1] * with_gap.A[i - 1, i]
        R_gap_english = Q_(R_gap, 'm ** 2 * K / W').to('hr * ft ** 2 * delta_degF / Btu').m
        np.testing.assert_allclose(1.0 / g_with - 1.0 / g_without, R_gap_english, rtol=1.0e-10)

    def test_unique_node_names(self):
        m = discretize(Construction.create('C', [concrete(), concrete()]))
        self.assertEqual(len(set(m.state_names)), m.num_states)

    def test_si_unit_system(self):
        m = discretize(self.construction, normalizer=UnitNormalizer(UnitSystem.si()))
        np.testing.assert_allclose(m.conductance, self.construction.thermal_conductance.m, rtol=1.0e-12)
        self.assertEqual(m.grid, self.matrices.grid)

    def test_to_frames(self):
        frames = self.matrices.to_frames()
        self.assertEqual(list(frames['B'].columns), ['T_out', 'T_in'])
        self.assertEqual(list(frames['C'].index), ['q_out', 'q_in'])
        self.assertEqual(frames['A'].shape, (4, 4))


class Test_discretize_errors(unittest.TestCase):
    """ Unit tests for constructions that can't be discretized """

    def test_all_no_mass(self):
        with self.assertRaises(DiscretizationError) as cm:
            discretize(no_mass_construction('Curtain'))
        self.assertEqual(cm.exception.construction_name, 'Curtain')
        self.assertIn('Curtain', str(cm.exception))

    def test_no_layers(self):
        with self.assertRaises(DiscretizationError):
            discretize(Construction.create('Empty', []))

    def test_invalid_layer(self):
        layer = concrete(0.0)
        with self.assertRaises(DiscretizationError):
            discretize(Construction.create('Zero thickness', [layer]))

    def test_single_layer(self):
        m = discretize(single_layer())
        self.assertEqual(m.grid.nodes_per_layer, (2,))


if __name__ == '__main__':
    unittest.main()
