from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import numpy as np


class ThermalNetworkComponent:
    """Base class of the components of a linear thermal network. The value of
    a component is a float expressed in the unit system in which the network
    is assembled (see class `UnitSystem`).
    """
    def __init__(self, value: float) -> None:
        self.value = float(value)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.value:.4g})"


class Resistor(ThermalNetworkComponent):
    """Represents a thermal resistor between two temperature nodes in a linear
    thermal network.
    """
    def __add__(self, other: Resistor) -> Resistor:
        """Adds the values of two resistors in series together and returns a
        single new resistor.
        """
        return Resistor(self.value + other.value)

    def __radd__(self, other: Resistor | int) -> Resistor:
        if isinstance(other, int) and other == 0:
            return self
        elif isinstance(other, Resistor):
            return self.__add__(other)
        else:
            raise NotImplementedError(
                f"Cannot add {type(other)} and {type(self)}."
            ) from None

    def __floordiv__(self, other: Resistor) -> Resistor:
        new_value = 1 / (1 / self.value + 1 / other.value)
        return Resistor(new_value)


class Capacitor(ThermalNetworkComponent):
    """Represents the thermal capacitor of a temperature node in a linear
    thermal network.
    """
    pass


class ConnectionSide(Enum):
    """Enum class to specify the connection side of a temperature node, either
    a connection on the heat flow input side, or a connection on the heat flow
    output side.
    """
    IN = 'in'
    OUT = 'out'


class TemperatureNode:
    """Represents a node with thermal capacity in a linear thermal network.

    The heat balance equation of the node corresponds with a row in the
    system matrix and a row in the input matrix of the state-space
    representation of the network. A coefficient in the system matrix links
    the node temperature with the temperature of a connected node; a
    coefficient in the input matrix links the node temperature with an
    external temperature (an input of the network).
    """
    def __init__(
        self,
        name: str,
        network_name: str,
        capacitor: Capacitor,
    ) -> None:
        self.name = name
        self.network_name = network_name
        self.capacitor = capacitor
        self.resistors_in: list[tuple[str | TemperatureNode, Resistor]] = []
        self.resistors_out: list[tuple[str | TemperatureNode, Resistor]] = []

    def connect_resistor(
        self,
        other_terminal: str | TemperatureNode,
        resistor: Resistor,
        this_side: ConnectionSide
    ) -> None:
        """Connects a thermal resistor to the temperature node.

        Parameters
        ----------
        other_terminal:
            The `TemperatureNode` on the other end of the resistor, or the name
            of an external temperature (an input of the network).
        resistor:
            The connecting thermal resistor.
        this_side: {ConnectionSide.IN, ConnectionSide.OUT}
            Side of the node where the resistor is connected. Heat flows into
            the node on the IN side and leaves the node on the OUT side.
        """
        if this_side == ConnectionSide.IN:
            self.resistors_in.append((other_terminal, resistor))
        else:
            self.resistors_out.append((other_terminal, resistor))

    @property
    def resistors(self) -> list[tuple[str | TemperatureNode, Resistor]]:
        return self.resistors_in + self.resistors_out

    def get_resistor(self, other_terminal: str | TemperatureNode) -> Resistor:
        """Returns the resistor that links this node to `other_terminal`.
        Parallel resistors to the same terminal are combined.
        """
        found = [r for term, r in self.resistors if term is other_terminal or term == other_terminal]
        if not found:
            raise KeyError(
                f"Node '{self.name}' is not connected to '{other_terminal}'."
            )
        resistor = found[0]
        for r in found[1:]:
            resistor = resistor // r
        return resistor

    def equation(self) -> tuple[dict[str, float], dict[str, float]]:
        """Returns the state and input part of the heat balance equation of the
        node:

            C * dT/dt = sum((T_j - T) / R_j)

        The state-dict maps the names of node temperatures to their
        coefficient in the equation divided by the node capacity; the
        input-dict does the same for external temperatures.
        """
        C = self.capacitor.value
        state_dict = {self.name: 0.0}
        input_dict = {}
        for terminal, resistor in self.resistors:
            coeff = 1.0 / (resistor.value * C)
            state_dict[self.name] -= coeff
            if isinstance(terminal, TemperatureNode):
                state_dict[terminal.name] = state_dict.get(terminal.name, 0.0) + coeff
            else:
                input_dict[terminal] = input_dict.get(terminal, 0.0) + coeff
        return state_dict, input_dict

    def __repr__(self) -> str:
        return f"{self.name}@{self.network_name}"


@dataclass
class HeatFlowOutput:
    """Defines an output of the network: the heat flow through the resistor
    between `terminal` and `node`. If `into_node` is True, the heat flow is
    positive when directed from `terminal` towards `node`; otherwise it is
    positive when directed from `node` towards `terminal`.
    """
    name: str
    node: TemperatureNode
    terminal: str | TemperatureNode
    into_node: bool = True


class LinearThermalNetwork:
    """Represents a linear thermal network of temperature nodes interconnected
    by thermal resistors. The set of heat balance node equations of the
    network is described by a system in state-space representation, with the
    node temperatures as state variables, the external temperatures as input
    variables, and heat flows through selected resistors as output variables.
    """
    def __init__(
        self,
        name: str,
        nodes: tuple[TemperatureNode, ...],
    ) -> None:
        """Creates a `LinearThermalNetwork` object.

        Parameters
        ----------
        name:
            Name to identify the linear thermal network.
        nodes:
            Tuple with all the nodes of the network, ordered according to their
            spatial position.
        """
        self.name = name
        self.nodes = nodes
        self._state_var_mapping: dict[str, int] = {
            node.name: i for i, node in enumerate(nodes)
        }
        self._input_var_mapping: dict[str, int] = self._get_input_var_mapping()
        self._output_names: list[str] = []

    def _get_input_var_mapping(self) -> dict[str, int]:
        """Assigns a column index in the input matrix to each external
        temperature, in the order in which they appear along the network.
        """
        input_indices = {}
        for node in self.nodes:
            _, inputs_dict = node.equation()
            for key in inputs_dict.keys():
                input_indices.setdefault(key, len(input_indices))
        return input_indices

    def _create_system_matrix(self) -> np.ndarray:
        n = len(self.nodes)
        A = np.zeros((n, n))
        for node in self.nodes:
            i = self._state_var_mapping[node.name]
            states_dict, _ = node.equation()
            for key, coeff in states_dict.items():
                try:
                    j = self._state_var_mapping[key]
                except KeyError:
                    raise KeyError(
                        f"Node '{key}' is connected to '{node.name}' but is "
                        f"not in network '{self.name}'."
                    ) from None
                A[i, j] = coeff
        return A

    def _create_input_matrix(self) -> np.ndarray:
        n = len(self.nodes)
        m = len(self._input_var_mapping)
        B = np.zeros((n, m))
        for node in self.nodes:
            i = self._state_var_mapping[node.name]
            _, inputs_dict = node.equation()
            for key, coeff in inputs_dict.items():
                B[i, self._input_var_mapping[key]] = coeff
        return B

    def _create_output_rows(self, output: HeatFlowOutput) -> tuple[np.ndarray, np.ndarray]:
        """Returns the row of the output matrix and the row of the feedforward
        matrix of a heat flow output: q = (T_terminal - T_node) / R.
        """
        c_row = np.zeros(len(self.nodes))
        d_row = np.zeros(len(self._input_var_mapping))
        resistor = output.node.get_resistor(output.terminal)
        sign = 1.0 if output.into_node else -1.0
        c_row[self._state_var_mapping[output.node.name]] -= sign / resistor.value
        if isinstance(output.terminal, TemperatureNode):
            c_row[self._state_var_mapping[output.terminal.name]] += sign / resistor.value
        else:
            d_row[self._input_var_mapping[output.terminal]] += sign / resistor.value
        return c_row, d_row

    def create_matrices(
        self,
        outputs: list[HeatFlowOutput]
    ) -> tuple[np.ndarray, ...]:
        """Creates and returns the system matrix A, input matrix B, output
        matrix C and feedforward matrix D of the network.
        """
        A = self._create_system_matrix()
        B = self._create_input_matrix()
        rows = [self._create_output_rows(output) for output in outputs]
        C = np.array([r[0] for r in rows])
        D = np.array([r[1] for r in rows])
        self._output_names = [output.name for output in outputs]
        return A, B, C, D

    @property
    def inputs(self) -> tuple[str, ...]:
        return tuple(self._input_var_mapping.keys())

    @property
    def states(self) -> tuple[str, ...]:
        return tuple(self._state_var_mapping.keys())

    @property
    def outputs(self) -> tuple[str, ...]:
        return tuple(self._output_names)
