from .thermal_network import (
    Resistor,
    Capacitor,
    ConnectionSide,
    TemperatureNode,
    HeatFlowOutput,
    LinearThermalNetwork
)
from .units import UnitSystem, NormalizedLayer, UnitNormalizer
from .construction_model import (
    NodalGrid,
    StateSpaceMatrices,
    ConstructionModel,
    create_nodal_grid,
    discretize
)
