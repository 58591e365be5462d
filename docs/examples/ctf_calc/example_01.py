"""
EXAMPLE 1
---------
CONDUCTION TRANSFER FUNCTIONS OF A SINGLE EXTERIOR WALL.
"""
import pandas as pd
from ctf_calc import Quantity
from ctf_calc.construction import MaterialLayer, Construction, SurfaceRoughness
from ctf_calc.thermal_models import discretize
from ctf_calc.ctf import TransferFunctionSolver

pd.set_option('display.max_columns', None)
pd.set_option('display.width', 200)

Q_ = Quantity

# ------------------------------------------------------------------------------
# MATERIAL LAYERS
gypsum = MaterialLayer.create(
    name='Gypsum board',
    t=Q_(12.7, 'mm'),
    k=Q_(0.16, 'W / (m * K)'),
    rho=Q_(800, 'kg / m ** 3'),
    c=Q_(1090, 'J / (kg * K)')
)
concrete = MaterialLayer.create(
    name='Heavyweight concrete',
    t=Q_(200, 'mm'),
    k=Q_(1.95, 'W / (m * K)'),
    rho=Q_(2240, 'kg / m ** 3'),
    c=Q_(900, 'J / (kg * K)')
)
insulation = MaterialLayer.create(
    name='Mineral wool',
    t=Q_(50, 'mm'),
    k=Q_(0.03, 'W / (m * K)'),
    rho=Q_(43, 'kg / m ** 3'),
    c=Q_(1210, 'J / (kg * K)')
)

# ------------------------------------------------------------------------------
# CONSTRUCTION (layers ordered from the inside to the outside)
wall = Construction.create(
    name='Exterior wall',
    layers=[gypsum, concrete, insulation],
    roughness=SurfaceRoughness.ROUGH
)
print(wall)
print(f"U = {wall.thermal_conductance.to('W / (m ** 2 * K)'):~P.3f}")

# ------------------------------------------------------------------------------
# STATE-SPACE MODEL OF THE WALL
matrices = discretize(wall, time_step=Q_(1, 'hr'))
frames = matrices.to_frames()
print(frames['A'], end='\n\n')
print(frames['B'], end='\n\n')

# ------------------------------------------------------------------------------
# CTF COEFFICIENTS
solver = TransferFunctionSolver(tolerance=1.0e-3, max_terms=18)
ctf = solver.solve(matrices, time_step=Q_(1, 'hr'))
print(ctf.to_frame(), end='\n\n')
print('steady-state conductance (outside, cross, inside):')
print(ctf.steady_state_conductance())
