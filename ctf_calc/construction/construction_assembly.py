from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
from ctf_calc import Quantity

if TYPE_CHECKING:
    from ctf_calc.ctf.coefficients import CTFCoefficientSet
    from ctf_calc.exceptions import CTFCalculationError


Q_ = Quantity


class SurfaceRoughness(Enum):
    """
    Enum class that defines the roughness category of the outside surface of
    a construction. The category is only stored and reported here; it is
    used elsewhere to determine the exterior convection coefficient.
    """
    VERY_ROUGH = 'VeryRough'
    ROUGH = 'Rough'
    MEDIUM_ROUGH = 'MediumRough'
    MEDIUM_SMOOTH = 'MediumSmooth'
    SMOOTH = 'Smooth'
    VERY_SMOOTH = 'VerySmooth'


@dataclass(frozen=True)
class MaterialLayer:
    """
    Dataclass that holds the resolved properties of a single layer in a
    construction.

    Attributes
    ----------
    name: str
        Name of the material.
    t: Quantity
        Thickness
    k: Quantity
        Conductivity
    rho: Quantity
        Mass density
    c: Quantity
        Specific heat capacity
    R: Quantity or None
        Unit thermal resistance of a no-mass layer. `None` for a layer with
        thermal capacity.

    Notes
    -----
    A layer is immutable once it has been created. Use `create()` for a layer
    with thermal capacity and `create_no_mass()` for a layer that is modeled
    as a pure thermal resistance.
    """
    name: str
    t: Quantity = Q_(0.0, 'm')
    k: Quantity = Q_(0.0, 'W / (m * K)')
    rho: Quantity = Q_(0.0, 'kg / m ** 3')
    c: Quantity = Q_(0.0, 'J / (kg * K)')
    R: Quantity | None = None

    @classmethod
    def create(
        cls,
        name: str,
        t: Quantity,
        k: Quantity,
        rho: Quantity,
        c: Quantity
    ) -> MaterialLayer:
        """
        Creates a `MaterialLayer` object with thermal capacity.

        Parameters
        ----------
        name:
            Name of the material.
        t:
            Thickness of the layer.
        k:
            Thermal conductivity of the material.
        rho:
            Mass density of the material.
        c:
            Specific heat capacity of the material.
        """
        return cls(
            name=name,
            t=t.to('m'),
            k=k.to('W / (m * K)'),
            rho=rho.to('kg / m ** 3'),
            c=c.to('J / (kg * K)')
        )

    @classmethod
    def create_no_mass(cls, name: str, R: Quantity) -> MaterialLayer:
        """
        Creates a `MaterialLayer` object without thermal capacity, only
        characterized by its unit thermal resistance `R`.
        """
        return cls(name=name, R=R.to('m ** 2 * K / W'))

    @property
    def is_no_mass(self) -> bool:
        """Returns True if the layer is a pure thermal resistance."""
        return self.R is not None

    @property
    def resistance(self) -> Quantity:
        """Returns the unit thermal resistance of the layer."""
        if self.R is not None:
            return self.R.to('m ** 2 * K / W')
        try:
            return (self.t / self.k).to('m ** 2 * K / W')
        except ZeroDivisionError:
            return Q_(float('inf'), 'm ** 2 * K / W')

    @property
    def heat_capacity(self) -> Quantity:
        """Returns the thermal capacity of the layer per unit area."""
        if self.R is not None:
            return Q_(0.0, 'J / (m ** 2 * K)')
        return (self.rho * self.c * self.t).to('J / (m ** 2 * K)')

    @property
    def diffusivity(self) -> Quantity:
        """Returns the thermal diffusivity of the layer material."""
        return (self.k / (self.rho * self.c)).to('m ** 2 / s')

    def __str__(self):
        if self.is_no_mass:
            return (
                f"{self.name}: no-mass layer, "
                f"R = {self.resistance:~P.3f}"
            )
        return (
            f"{self.name}: t = {self.t.to('m'):~P.3f}, "
            f"k = {self.k:~P.3f}, "
            f"rho = {self.rho:~P.1f}, "
            f"c = {self.c:~P.1f}"
        )


class Construction:
    """
    Represents a layered, opaque construction (wall, roof, floor) made of an
    ordered sequence of material layers.

    The layers are ordered from the inside surface (index 0) towards the
    outside surface (last index).

    A construction is created before the CTF calculation starts. Only the
    calculated CTF set (attribute `ctf`) or the reason why the calculation
    failed (attribute `ctf_error`) are added to it afterwards; the layers are
    never changed.
    """
    def __init__(self):
        self.name: str = ''
        self.layers: tuple[MaterialLayer, ...] = ()
        self.is_used: bool = True
        self.outside_thermal_absorptance: float = 0.9
        self.inside_thermal_absorptance: float = 0.9
        self.outside_solar_absorptance: float = 0.7
        self.inside_solar_absorptance: float = 0.7
        self.outside_roughness: SurfaceRoughness = SurfaceRoughness.MEDIUM_ROUGH
        self.ctf: CTFCoefficientSet | None = None
        self.ctf_error: CTFCalculationError | None = None

    @classmethod
    def create(
        cls,
        name: str,
        layers: list[MaterialLayer] | tuple[MaterialLayer, ...],
        is_used: bool = True,
        thermal_absorptance: tuple[float, float] = (0.9, 0.9),
        solar_absorptance: tuple[float, float] = (0.7, 0.7),
        roughness: SurfaceRoughness = SurfaceRoughness.MEDIUM_ROUGH
    ) -> Construction:
        """
        Creates a `Construction` object.

        Parameters
        ----------
        name:
            Name that identifies the construction.
        layers:
            Material layers ordered from the inside towards the outside of the
            construction.
        is_used:
            Indicates that the construction is referenced by a surface in the
            building model. Only used constructions are written to the CTF
            report.
        thermal_absorptance:
            Tuple (outside, inside) with the thermal absorptance of the
            outer and inner surface layer.
        solar_absorptance:
            Tuple (outside, inside) with the solar absorptance of the outer
            and inner surface layer.
        roughness:
            Roughness category of the outside surface.
        """
        construction = cls()
        construction.name = name
        construction.layers = tuple(layers)
        construction.is_used = is_used
        construction.outside_thermal_absorptance = thermal_absorptance[0]
        construction.inside_thermal_absorptance = thermal_absorptance[1]
        construction.outside_solar_absorptance = solar_absorptance[0]
        construction.inside_solar_absorptance = solar_absorptance[1]
        construction.outside_roughness = roughness
        return construction

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    @property
    def has_mass_layer(self) -> bool:
        """Returns True if at least one layer has thermal capacity."""
        return any(not layer.is_no_mass for layer in self.layers)

    @property
    def thickness(self) -> Quantity:
        """Returns the total thickness of the mass layers."""
        t = sum(layer.t.to('m').m for layer in self.layers)
        return Q_(t, 'm')

    @property
    def thermal_resistance(self) -> Quantity:
        """Returns the surface-to-surface unit thermal resistance."""
        R = sum(layer.resistance.to('m ** 2 * K / W').m for layer in self.layers)
        return Q_(R, 'm ** 2 * K / W')

    @property
    def thermal_conductance(self) -> Quantity:
        """Returns the surface-to-surface unit thermal conductance, which
        equals the steady-state value implied by a CTF set of the
        construction.
        """
        R = self.thermal_resistance.m
        if math.isinf(R):
            return Q_(0.0, 'W / (m ** 2 * K)')
        if R == 0.0:
            return Q_(float('inf'), 'W / (m ** 2 * K)')
        return Q_(1.0 / R, 'W / (m ** 2 * K)')

    @property
    def is_solved(self) -> bool:
        return self.ctf is not None

    def __str__(self):
        _str = f'Construction: {self.name}\n'
        _str += '-' * len(_str[:-1]) + '\n'
        for layer in self.layers:
            _str += f"{layer}\n"
        return _str
