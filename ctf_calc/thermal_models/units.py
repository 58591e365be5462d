from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence, TYPE_CHECKING
import numpy as np
from ctf_calc import UNITS, Quantity, SI_UNITS
from ctf_calc.construction import MaterialLayer

if TYPE_CHECKING:
    from ctf_calc.ctf.coefficients import CTFCoefficientSet


Q_ = Quantity


@dataclass(frozen=True)
class UnitSystem:
    """
    Groups the base units in which the state-space matrices of a
    construction are assembled and solved. All derived units (conductivity,
    thermal resistance, etc.) follow from these base units.
    """
    unit_L: UNITS.Unit = UNITS.Unit('m')
    unit_t: UNITS.Unit = UNITS.Unit('s')
    unit_E: UNITS.Unit = UNITS.Unit('J')
    unit_T: UNITS.Unit = UNITS.Unit('K')
    unit_M: UNITS.Unit = UNITS.Unit('kg')

    @classmethod
    def si(cls) -> UnitSystem:
        return cls()

    @classmethod
    def english(cls) -> UnitSystem:
        """Inch-pound unit system (ft, hr, Btu, °F, lb). The eigen-solution of
        the construction's system matrix is better conditioned in these units
        for the usual range of building material properties.
        """
        return cls(
            unit_L=UNITS.Unit('ft'),
            unit_t=UNITS.Unit('hr'),
            unit_E=UNITS.Unit('Btu'),
            unit_T=UNITS.Unit('delta_degF'),
            unit_M=UNITS.Unit('lb')
        )

    @property
    def unit_k(self) -> UNITS.Unit:
        return self.unit_E / (self.unit_t * self.unit_L * self.unit_T)

    @property
    def unit_rho(self) -> UNITS.Unit:
        return self.unit_M / self.unit_L ** 3

    @property
    def unit_c(self) -> UNITS.Unit:
        return self.unit_E / (self.unit_M * self.unit_T)

    @property
    def unit_R(self) -> UNITS.Unit:
        """Unit of unit thermal resistance."""
        return self.unit_L ** 2 * self.unit_T * self.unit_t / self.unit_E

    @property
    def unit_U(self) -> UNITS.Unit:
        """Unit of unit thermal conductance."""
        return self.unit_E / (self.unit_t * self.unit_L ** 2 * self.unit_T)

    @property
    def unit_C(self) -> UNITS.Unit:
        """Unit of thermal capacity per unit area."""
        return self.unit_E / (self.unit_L ** 2 * self.unit_T)


@dataclass(frozen=True)
class NormalizedLayer:
    """
    Material layer with its properties expressed as plain floats in the
    base units of a `UnitSystem`. `R` is None for a layer with thermal
    capacity.
    """
    name: str
    t: float
    k: float
    rho: float
    c: float
    R: float | None
    unit_system: UnitSystem

    @property
    def is_no_mass(self) -> bool:
        return self.R is not None

    @property
    def resistance(self) -> float:
        if self.R is not None:
            return self.R
        return self.t / self.k

    @property
    def heat_capacity(self) -> float:
        if self.R is not None:
            return 0.0
        return self.rho * self.c * self.t

    @property
    def diffusivity(self) -> float:
        return self.k / (self.rho * self.c)


class UnitNormalizer:
    """
    Converts SI layer properties into the unit system in which the
    state-space matrices are assembled, and converts the resulting CTF
    coefficients back to SI.

    The time step of a CTF set is always expressed in hours. The outside,
    cross and inside coefficients are unit thermal conductances; the flux
    history coefficients are dimensionless.
    """
    def __init__(self, unit_system: UnitSystem | None = None) -> None:
        self.unit_system = unit_system or UnitSystem.english()

    def normalize(self, layers: Sequence[MaterialLayer]) -> tuple[NormalizedLayer, ...]:
        """Returns the layers with their properties in the units of the
        normalizer's unit system.
        """
        us = self.unit_system
        normalized = []
        for layer in layers:
            if layer.is_no_mass:
                normalized.append(NormalizedLayer(
                    name=layer.name,
                    t=0.0, k=0.0, rho=0.0, c=0.0,
                    R=layer.R.to(us.unit_R).m,
                    unit_system=us
                ))
            else:
                normalized.append(NormalizedLayer(
                    name=layer.name,
                    t=layer.t.to(us.unit_L).m,
                    k=layer.k.to(us.unit_k).m,
                    rho=layer.rho.to(us.unit_rho).m,
                    c=layer.c.to(us.unit_c).m,
                    R=None,
                    unit_system=us
                ))
        return tuple(normalized)

    def denormalize(
        self,
        obj: CTFCoefficientSet | Sequence[NormalizedLayer]
    ) -> CTFCoefficientSet | tuple[MaterialLayer, ...]:
        """Converts a CTF set calculated in the normalizer's unit system
        back to SI. If a sequence of normalized layers is passed instead,
        returns the equivalent SI `MaterialLayer` objects.
        """
        if isinstance(obj, (list, tuple)):
            return tuple(self._denormalize_layer(layer) for layer in obj)
        return self._denormalize_ctf(obj)

    def conductance_factor(self) -> float:
        """Returns the factor that converts a unit thermal conductance from
        the normalizer's unit system to W/(m².K).
        """
        return Q_(1.0, self.unit_system.unit_U).to(SI_UNITS['conductance']).m

    def time_step(self, dt: Quantity) -> float:
        """Returns time step `dt` as a float in the normalizer's time unit."""
        return dt.to(self.unit_system.unit_t).m

    def _denormalize_ctf(self, ctf: CTFCoefficientSet) -> CTFCoefficientSet:
        f = self.conductance_factor()
        return replace(
            ctf,
            outside=np.asarray(ctf.outside) * f,
            cross=np.asarray(ctf.cross) * f,
            inside=np.asarray(ctf.inside) * f,
            flux=np.array(ctf.flux)
        )

    @staticmethod
    def _denormalize_layer(layer: NormalizedLayer) -> MaterialLayer:
        us = layer.unit_system
        if layer.is_no_mass:
            return MaterialLayer.create_no_mass(
                name=layer.name,
                R=Q_(layer.R, us.unit_R)
            )
        return MaterialLayer.create(
            name=layer.name,
            t=Q_(layer.t, us.unit_L),
            k=Q_(layer.k, us.unit_k),
            rho=Q_(layer.rho, us.unit_rho),
            c=Q_(layer.c, us.unit_c)
        )
