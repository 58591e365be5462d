from __future__ import annotations

from dataclasses import dataclass, field
from ctf_calc import Quantity
from ctf_calc.thermal_models.units import UnitSystem, UnitNormalizer

Q_ = Quantity


@dataclass
class CTFSettings:
    """
    Groups the settings of the CTF calculation.

    Attributes
    ----------
    time_step: Quantity, default 1 hr
        Time step of the CTF coefficients.
    tolerance: float, default 1.0e-3
        Relative tolerance of the term selection: the magnitude of the
        response coefficients that are discarded, relative to the steady-state
        conductance of the construction, may not exceed this value.
    max_terms: int, default 18
        Maximum number of CTF history terms N of a construction.
    max_total_nodes: int, default 75
        Maximum number of temperature nodes in a construction.
    node_spacing_factor: float, default 1.0
        Multiplier of the target node spacing `sqrt(2 * alpha * dt)`.
    report_constructions: bool, default False
        Write the CTF report even if no construction failed.
    num_workers: int, optional
        Number of worker threads used to solve the constructions. If None,
        the default of `concurrent.futures.ThreadPoolExecutor` is used. With
        1, the constructions are solved one after the other.
    unit_system: UnitSystem, default inch-pound units
        Unit system in which the state-space matrices are assembled and
        solved.
    """
    time_step: Quantity = Q_(1.0, 'hr')
    tolerance: float = 1.0e-3
    max_terms: int = 18
    max_total_nodes: int = 75
    node_spacing_factor: float = 1.0
    report_constructions: bool = False
    num_workers: int | None = None
    unit_system: UnitSystem = field(default_factory=UnitSystem.english)

    def __post_init__(self):
        if not self.time_step.to('hr').m > 0.0:
            raise ValueError("`time_step` must be strictly positive.")
        if not 0.0 < self.tolerance < 1.0:
            raise ValueError("`tolerance` must be between 0 and 1.")
        if self.max_terms < 1:
            raise ValueError("`max_terms` must be at least 1.")
        if self.max_total_nodes < 1:
            raise ValueError("`max_total_nodes` must be at least 1.")
        if not self.node_spacing_factor > 0.0:
            raise ValueError("`node_spacing_factor` must be strictly positive.")
        if self.num_workers is not None and self.num_workers < 1:
            raise ValueError("`num_workers` must be at least 1.")

    @property
    def normalizer(self) -> UnitNormalizer:
        return UnitNormalizer(self.unit_system)
