from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
import numpy as np
import pandas as pd


def _read_only(values: Sequence[float]) -> np.ndarray:
    a = np.array(values, dtype=float).reshape(-1)
    a.flags.writeable = False
    return a


@dataclass(frozen=True, eq=False)
class CTFCoefficientSet:
    """
    Conduction transfer function coefficients of a construction.

    With T_o and T_i the outside and inside surface temperature, the heat
    flux at time t into the construction at the outside surface (q_o) and
    out of the construction at the inside surface (q_i) are:

        q_i(t) = sum(Y_j * T_o(t - j)) - sum(Z_j * T_i(t - j)) + sum(F_j * q_i(t - j))
        q_o(t) = sum(X_j * T_o(t - j)) - sum(Y_j * T_i(t - j)) + sum(F_j * q_o(t - j))

    where X = `outside`, Y = `cross`, Z = `inside` (indices j = 0..N) and
    F = `flux` (indices j = 1..N, stored at positions 0..N-1).

    Attributes
    ----------
    time_step:
        Time step of the coefficients in hours.
    outside, cross, inside:
        Read-only arrays of length N + 1, unit thermal conductances.
    flux:
        Read-only array of length N with the dimensionless flux history
        coefficients.
    """
    time_step: float
    outside: np.ndarray
    cross: np.ndarray
    inside: np.ndarray
    flux: np.ndarray

    def __post_init__(self):
        for name in ('outside', 'cross', 'inside', 'flux'):
            object.__setattr__(self, name, _read_only(getattr(self, name)))
        if not self.time_step > 0.0:
            raise ValueError(
                f"The time step of a CTF set must be strictly positive, "
                f"got {self.time_step}."
            )
        n = len(self.flux)
        for name in ('outside', 'cross', 'inside'):
            if len(getattr(self, name)) != n + 1:
                raise ValueError(
                    f"Coefficient sequence `{name}` has length "
                    f"{len(getattr(self, name))}; expected {n + 1} for "
                    f"{n} flux history terms."
                )

    @property
    def num_terms(self) -> int:
        """Returns the history order N."""
        return len(self.flux)

    def steady_state_conductance(self) -> tuple[float, float, float]:
        """Returns the steady-state unit thermal conductance implied by the
        outside, cross and inside coefficients respectively. For a consistent
        set the three values are equal to the thermal conductance of the
        construction.
        """
        denominator = 1.0 - self.flux.sum()
        return (
            self.outside.sum() / denominator,
            self.cross.sum() / denominator,
            self.inside.sum() / denominator
        )

    def heat_fluxes(
        self,
        T_out: Sequence[float],
        T_in: Sequence[float],
        q_out: Sequence[float],
        q_in: Sequence[float]
    ) -> tuple[float, float]:
        """
        Returns the current heat flux at the outside and inside surface.

        Parameters
        ----------
        T_out, T_in:
            Outside and inside surface temperature at the current time step
            (index 0) and the N previous time steps.
        q_out, q_in:
            Outside and inside surface heat flux at the N previous time steps
            (index 0 is one time step ago).

        Returns
        -------
        Tuple (q_out, q_in): heat flux into the construction at the outside
        surface, and heat flux out of the construction at the inside surface.
        """
        n = self.num_terms
        T_out = np.asarray(T_out, dtype=float)[:n + 1]
        T_in = np.asarray(T_in, dtype=float)[:n + 1]
        q_out = np.asarray(q_out, dtype=float)[:n]
        q_in = np.asarray(q_in, dtype=float)[:n]
        if len(T_out) != n + 1 or len(T_in) != n + 1 or len(q_out) != n or len(q_in) != n:
            raise ValueError(
                f"The temperature histories need {n + 1} values and the "
                f"heat flux histories {n} values."
            )
        q_o = self.outside @ T_out - self.cross @ T_in + self.flux @ q_out
        q_i = self.cross @ T_out - self.inside @ T_in + self.flux @ q_in
        return float(q_o), float(q_i)

    def to_frame(self) -> pd.DataFrame:
        """Returns the coefficients as a Pandas DataFrame indexed by time lag
        (0..N). The flux history coefficient at lag 0 is NaN.
        """
        df = pd.DataFrame(
            data={
                'outside': self.outside,
                'cross': self.cross,
                'inside': self.inside,
                'flux': np.concatenate(([np.nan], self.flux))
            },
            index=pd.RangeIndex(self.num_terms + 1, name='lag')
        )
        return df
