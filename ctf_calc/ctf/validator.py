"""
Final checks on a set of CTF coefficients before it is committed to its
construction.
"""
from __future__ import annotations

import numpy as np
import control as ct
from ctf_calc.exceptions import TermLimitExceeded, ConvergenceError
from ctf_calc.thermal_models.construction_model import StateSpaceMatrices
from .coefficients import CTFCoefficientSet


def validate(raw: CTFCoefficientSet, max_terms: int) -> None:
    """
    Checks a raw (not yet committed) CTF set.

    Raises
    ------
    TermLimitExceeded
        If the number of history terms is larger than `max_terms`.
    ConvergenceError
        If a coefficient is not finite, or if the flux history is not stable
        (the sum of the flux history coefficients must be smaller than 1).
    """
    if raw.num_terms > max_terms:
        raise TermLimitExceeded(raw.num_terms, max_terms)
    arrays = (raw.outside, raw.cross, raw.inside, raw.flux)
    if not all(np.all(np.isfinite(a)) for a in arrays):
        raise ConvergenceError("CTF coefficients are not finite")
    if not 1.0 - raw.flux.sum() > 0.0:
        raise ConvergenceError(
            f"flux history is unstable (sum of flux coefficients "
            f"{raw.flux.sum():.6g} is not smaller than 1)"
        )


def check_conservation(
    raw: CTFCoefficientSet,
    matrices: StateSpaceMatrices,
    rtol: float = 1.0e-6
) -> None:
    """
    Compares the steady-state conductances implied by a CTF set with the
    steady-state (DC) gains of the continuous-time system, both in the unit
    system of `matrices`.

    Raises
    ------
    ConvergenceError
        If a relative difference is larger than `rtol`.
    """
    gain = np.real(np.asarray(ct.dcgain(matrices.system), dtype=complex))
    # outside: T_out -> q_out, cross: T_out -> q_in, inside: -(T_in -> q_in)
    expected = (gain[0, 0], gain[1, 0], -gain[1, 1])
    for name, U_ctf, U_ss in zip(
        ('outside', 'cross', 'inside'),
        raw.steady_state_conductance(),
        expected
    ):
        if not np.isclose(U_ctf, U_ss, rtol=rtol, atol=0.0):
            raise ConvergenceError(
                f"steady-state conductance of the {name} coefficients "
                f"({U_ctf:.6g}) differs from the conductance of the "
                f"construction ({U_ss:.6g})"
            )
