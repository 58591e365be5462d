from __future__ import annotations

import math
from dataclasses import dataclass, field
import numpy as np
import control as ct
import pandas as pd
from ctf_calc import Quantity
from ctf_calc.logging import ModuleLogger
from ctf_calc.construction import Construction
from ctf_calc.exceptions import DiscretizationError
from .thermal_network import (
    LinearThermalNetwork,
    TemperatureNode,
    HeatFlowOutput,
    Resistor,
    Capacitor,
    ConnectionSide
)
from .units import UnitNormalizer, UnitSystem, NormalizedLayer

Q_ = Quantity

logger = ModuleLogger.get_logger(__name__)

OUTSIDE_INPUT = 'T_out'
INSIDE_INPUT = 'T_in'


@dataclass(frozen=True)
class NodalGrid:
    """Number of temperature nodes in each layer of a construction (layers
    ordered inside to outside). No-mass layers have zero nodes.
    """
    layer_names: tuple[str, ...]
    nodes_per_layer: tuple[int, ...]

    @property
    def total_nodes(self) -> int:
        return sum(self.nodes_per_layer)


@dataclass
class StateSpaceMatrices:
    """
    Continuous-time state-space representation of the conduction heat
    transfer through a construction:

        dx/dt = A x + B u
        y = C x + D u

    with x the node temperatures, u = [outside surface temperature, inside
    surface temperature] and y = [heat flux into the construction at the
    outside surface, heat flux leaving the construction at the inside
    surface]. All values are expressed in the base units of `unit_system`.

    Attributes
    ----------
    capacitances:
        Thermal capacity of each node, per unit area. The system matrix is
        similar to a symmetric matrix through these capacities.
    conductance:
        Steady-state surface-to-surface unit thermal conductance.
    time_step:
        Time step the node spacing was chosen for; also the default time
        step of the CTF set calculated from these matrices.
    """
    construction_name: str
    A: np.ndarray
    B: np.ndarray
    C: np.ndarray
    D: np.ndarray
    capacitances: np.ndarray
    conductance: float
    grid: NodalGrid
    unit_system: UnitSystem
    state_names: tuple[str, ...] = ()
    input_names: tuple[str, ...] = (OUTSIDE_INPUT, INSIDE_INPUT)
    output_names: tuple[str, ...] = ('q_out', 'q_in')
    time_step: Quantity = field(default_factory=lambda: Q_(1.0, 'hr'))

    @property
    def num_states(self) -> int:
        return self.A.shape[0]

    @property
    def system(self) -> ct.StateSpace:
        """Returns the state-space system as a `control.StateSpace` object."""
        return ct.ss(self.A, self.B, self.C, self.D, name=self.construction_name)

    def to_frames(self) -> dict[str, pd.DataFrame]:
        """Returns the four matrices as labeled Pandas DataFrame objects."""
        states = list(self.state_names) or None
        return {
            'A': pd.DataFrame(self.A, index=states, columns=states),
            'B': pd.DataFrame(self.B, index=states, columns=list(self.input_names)),
            'C': pd.DataFrame(self.C, index=list(self.output_names), columns=states),
            'D': pd.DataFrame(self.D, index=list(self.output_names), columns=list(self.input_names))
        }


class ConstructionModel(LinearThermalNetwork):
    """Models a construction as a one-dimensional linear thermal network
    between its outside and inside surface.

    Each layer with thermal capacity is divided into a number of slices. A
    slice is represented by a temperature node in the middle of the slice,
    with half of the slice resistance on both sides. No-mass layers only add
    their resistance to the resistor between the adjacent nodes. The surface
    temperatures on both sides of the construction are the inputs of the
    network.
    """
    def __init__(
        self,
        construction: Construction,
        layers: tuple[NormalizedLayer, ...],
        grid: NodalGrid
    ) -> None:
        """Creates a `ConstructionModel` instance.

        Parameters
        ----------
        construction:
            The construction being modeled.
        layers:
            The layers of the construction in normalized units, ordered
            inside to outside.
        grid:
            Number of nodes for each layer.
        """
        self.construction = construction
        self.layers = layers
        self.grid = grid
        nodes = self._create_nodes()
        super().__init__(construction.name, tuple(nodes))

    def _create_nodes(self) -> list[TemperatureNode]:
        """Creates the temperature nodes of the network, going from the
        outside surface to the inside surface.
        """
        # A layer with thermal capacity is split in slices. Each slice becomes
        # a temperature node with a resistor on its left and right side. A
        # no-mass layer is only a resistor. A list of resistors and nodes
        # results, e.g. `[R, N, R, R, N, R, R, R, N, R]`.
        items: list[Resistor | TemperatureNode] = []
        pairs = list(zip(self.layers, self.grid.nodes_per_layer))
        for layer, n in reversed(pairs):
            if layer.is_no_mass:
                items.append(Resistor(layer.R))
                continue
            R_half_slice = layer.resistance / (2 * n)
            C_slice = layer.heat_capacity / n
            for i in range(n):
                node = TemperatureNode(
                    name=f"{layer.name}[{i + 1}]",
                    network_name=self.construction.name,
                    capacitor=Capacitor(C_slice)
                )
                items.extend([Resistor(R_half_slice), node, Resistor(R_half_slice)])

        # Resistors in series between two nodes are replaced by a single
        # resistor: `[R, N, R, N, R, ... N, R]`.
        chain: list[Resistor | TemperatureNode] = []
        resistors: list[Resistor] = []
        for item in items:
            if isinstance(item, Resistor):
                resistors.append(item)
            else:
                chain.extend([sum(resistors), item])
                resistors = []
        chain.append(sum(resistors))

        nodes = chain[1::2]
        self._make_node_names_unique(nodes)
        for i, node in enumerate(nodes):
            pre_node = nodes[i - 1] if i > 0 else OUTSIDE_INPUT
            next_node = nodes[i + 1] if i < len(nodes) - 1 else INSIDE_INPUT
            node.connect_resistor(pre_node, chain[2 * i], ConnectionSide.IN)
            node.connect_resistor(next_node, chain[2 * i + 2], ConnectionSide.OUT)
        return nodes

    @staticmethod
    def _make_node_names_unique(nodes: list[TemperatureNode]) -> None:
        # The same material can appear more than once in a construction.
        seen: dict[str, int] = {}
        for node in nodes:
            count = seen.get(node.name, 0)
            seen[node.name] = count + 1
            if count:
                node.name = f"{node.name}#{count + 1}"

    def state_space(self, time_step: Quantity = Q_(1.0, 'hr')) -> StateSpaceMatrices:
        """Returns the state-space matrices of the construction model, set up
        for CTF calculations with time step `time_step`.
        """
        outputs = [
            HeatFlowOutput('q_out', self.nodes[0], OUTSIDE_INPUT, into_node=True),
            HeatFlowOutput('q_in', self.nodes[-1], INSIDE_INPUT, into_node=False)
        ]
        A, B, C, D = self.create_matrices(outputs)
        capacitances = np.array([node.capacitor.value for node in self.nodes])
        R_total = sum(layer.resistance for layer in self.layers)
        return StateSpaceMatrices(
            construction_name=self.construction.name,
            A=A, B=B, C=C, D=D,
            capacitances=capacitances,
            conductance=1.0 / R_total,
            grid=self.grid,
            unit_system=self.layers[0].unit_system,
            state_names=self.states,
            input_names=self.inputs,
            output_names=self.outputs,
            time_step=time_step
        )


def _check_layers(construction: Construction) -> None:
    if not construction.layers:
        raise DiscretizationError(
            "construction has no layers", construction.name
        )
    for layer in construction.layers:
        if layer.is_no_mass:
            R = layer.R.to('m ** 2 * K / W').m
            if not (R > 0.0 and math.isfinite(R)):
                raise DiscretizationError(
                    f"no-mass layer '{layer.name}' needs a positive, finite "
                    f"thermal resistance", construction.name
                )
            continue
        values = (
            layer.t.to('m').m,
            layer.k.to('W / (m * K)').m,
            layer.rho.to('kg / m ** 3').m,
            layer.c.to('J / (kg * K)').m
        )
        if not all(v > 0.0 and math.isfinite(v) for v in values):
            raise DiscretizationError(
                f"layer '{layer.name}' needs a positive thickness, "
                f"conductivity, density and specific heat", construction.name
            )
    if not construction.has_mass_layer:
        raise DiscretizationError(
            "all layers are no-mass layers; a construction needs at least "
            "one layer with thermal capacity", construction.name
        )


def create_nodal_grid(
    layers: tuple[NormalizedLayer, ...],
    dt: float,
    node_spacing_factor: float = 1.0,
    max_total_nodes: int = 75,
    construction_name: str = ''
) -> NodalGrid:
    """
    Determines the number of nodes in each layer.

    The target node spacing of a layer is `sqrt(2 * alpha * dt)` (times
    `node_spacing_factor`), where `alpha` is the thermal diffusivity of the
    layer material and `dt` the time step, both in the same unit system.
    Each layer with thermal capacity gets at least one node. If the total
    number of nodes exceeds `max_total_nodes`, the number of nodes in each
    layer is reduced in proportion.
    """
    counts = []
    for layer in layers:
        if layer.is_no_mass:
            counts.append(0)
            continue
        dx = node_spacing_factor * math.sqrt(2.0 * layer.diffusivity * dt)
        counts.append(max(1, int(layer.t / dx)))

    num_mass_layers = sum(1 for n in counts if n > 0)
    if num_mass_layers > max_total_nodes:
        raise DiscretizationError(
            f"the construction has {num_mass_layers} layers with thermal "
            f"capacity, more than the maximum of {max_total_nodes} nodes",
            construction_name
        )
    total = sum(counts)
    if total > max_total_nodes:
        scale = max_total_nodes / total
        counts = [max(1, int(n * scale)) if n > 0 else 0 for n in counts]
        while sum(counts) > max_total_nodes:
            i = counts.index(max(counts))
            counts[i] -= 1
    return NodalGrid(
        layer_names=tuple(layer.name for layer in layers),
        nodes_per_layer=tuple(counts)
    )


def discretize(
    construction: Construction,
    time_step: Quantity = Q_(1.0, 'hr'),
    normalizer: UnitNormalizer | None = None,
    node_spacing_factor: float = 1.0,
    max_total_nodes: int = 75
) -> StateSpaceMatrices:
    """
    Turns a construction into the continuous-time state-space matrices of
    its linear thermal network.

    Parameters
    ----------
    construction:
        Construction with its material layers ordered inside to outside.
    time_step:
        Time step of the CTF calculation; determines the node spacing.
    normalizer:
        Converts the SI layer properties into the unit system in which the
        matrices are assembled. By default inch-pound units are used.
    node_spacing_factor:
        Multiplier of the target node spacing. A value below 1 gives more
        nodes per layer.
    max_total_nodes:
        Maximum number of nodes in the construction.

    Raises
    ------
    DiscretizationError
        If the construction has no layer with thermal capacity or if a layer
        has invalid properties.
    """
    _check_layers(construction)
    normalizer = normalizer or UnitNormalizer()
    layers = normalizer.normalize(construction.layers)
    dt = normalizer.time_step(time_step)
    grid = create_nodal_grid(
        layers, dt,
        node_spacing_factor=node_spacing_factor,
        max_total_nodes=max_total_nodes,
        construction_name=construction.name
    )
    logger.debug(
        f"Construction '{construction.name}': nodes per layer "
        f"{dict(zip(grid.layer_names, grid.nodes_per_layer))}"
    )
    model = ConstructionModel(construction, layers, grid)
    return model.state_space(time_step)
