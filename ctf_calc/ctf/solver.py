"""
State-space calculation of conduction transfer functions.

The continuous-time system of a construction (see `StateSpaceMatrices`) is
decomposed into its thermal modes. Because the system matrix equals
`diag(1/Cn) K` with `K` symmetric and `Cn` the node capacities, it is similar
to the symmetric matrix `Cn^-1/2 K Cn^-1/2`: the eigenvalues are real and
negative and the modes decouple.

Surface temperatures are assumed to vary linearly over a time step
(triangular pulses). Sampled at the time step `dt`, mode k with eigenvalue
`lam_k` then responds to a unit triangular pulse with

    h_0 = r_k * G1_k
    h_j = r_k * p_k ** (j - 1) * (G0_k + p_k * G1_k)    (j >= 1)

where `p_k = exp(lam_k * dt)` and `r_k` is the residue of the mode for a
given input/output pair. Summed over all modes, these are the (infinite)
response factors of the construction. The CTF set with history order N
keeps the N slowest modes as dynamic modes and replaces the faster modes by
their steady-state response.
"""
from __future__ import annotations

from dataclasses import dataclass
import numpy as np
import scipy.linalg
from ctf_calc import Quantity
from ctf_calc.logging import ModuleLogger
from ctf_calc.exceptions import ConvergenceError
from ctf_calc.thermal_models.construction_model import StateSpaceMatrices
from ctf_calc.thermal_models.units import UnitNormalizer
from .coefficients import CTFCoefficientSet
from .validator import validate, check_conservation

logger = ModuleLogger.get_logger(__name__)

# (output index, input index, sign) of the outside, cross and inside series
_SERIES = {
    'outside': (0, 0, 1.0),
    'cross': (1, 0, 1.0),
    'inside': (1, 1, -1.0)
}


@dataclass
class ModalDecomposition:
    """
    Diagonal (modal) form of a continuous-time construction system. Modes are
    sorted from slow to fast.

    Attributes
    ----------
    eigenvalues:
        Eigenvalues of the system matrix (all negative).
    T, T_inv:
        Transformation between node temperatures x and modal coordinates z:
        `x = T z` and `z = T_inv x`.
    B, C, D:
        Input, output and feedforward matrix in modal coordinates.
    dt:
        Time step in the time unit of the system.
    """
    eigenvalues: np.ndarray
    T: np.ndarray
    T_inv: np.ndarray
    B: np.ndarray
    C: np.ndarray
    D: np.ndarray
    dt: float

    @property
    def num_modes(self) -> int:
        return len(self.eigenvalues)

    @property
    def poles(self) -> np.ndarray:
        """Returns the discrete-time poles `exp(lam * dt)`."""
        return np.exp(self.eigenvalues * self.dt)

    @property
    def gammas(self) -> tuple[np.ndarray, np.ndarray]:
        """Returns the modal input weights (G0, G1) of the input values at the
        start and at the end of a time step.
        """
        lam, dt = self.eigenvalues, self.dt
        x = lam * dt
        em1 = np.expm1(x)
        G1 = (em1 - x) / (lam ** 2 * dt)
        G0 = (x * (em1 + 1.0) - em1) / (lam ** 2 * dt)
        return G0, G1

    def transition_matrix(self) -> np.ndarray:
        """Returns the discrete-time state transition matrix `exp(A * dt)`."""
        return self.T @ np.diag(self.poles) @ self.T_inv

    def input_matrices(self) -> tuple[np.ndarray, np.ndarray]:
        """Returns the discrete-time input matrices of the input values at the
        start and at the end of a time step:
        `x[k + 1] = Phi x[k] + Gamma0 u[k] + Gamma1 u[k + 1]`.
        """
        G0, G1 = self.gammas
        Gamma0 = self.T @ (G0[:, None] * self.B)
        Gamma1 = self.T @ (G1[:, None] * self.B)
        return Gamma0, Gamma1

    def residues(self, series: str) -> np.ndarray:
        i, j, sign = _SERIES[series]
        return sign * self.C[i, :] * self.B[:, j]

    def feedthrough(self, series: str) -> float:
        i, j, sign = _SERIES[series]
        return sign * self.D[i, j]

    def steady_state_gain(self, series: str) -> float:
        r = self.residues(series)
        return self.feedthrough(series) + np.sum(-r / self.eigenvalues)


class TransferFunctionSolver:
    """
    Calculates the CTF set of a construction from its state-space matrices.

    Parameters
    ----------
    tolerance:
        Relative tolerance of the term selection.
    max_terms:
        Maximum number of history terms.
    conservation_rtol:
        Relative tolerance on the steady-state conductance implied by the
        coefficients.
    """
    def __init__(
        self,
        tolerance: float = 1.0e-3,
        max_terms: int = 18,
        conservation_rtol: float = 1.0e-3
    ) -> None:
        self.tolerance = tolerance
        self.max_terms = max_terms
        self.conservation_rtol = conservation_rtol

    @staticmethod
    def decompose(matrices: StateSpaceMatrices, dt: float) -> ModalDecomposition:
        """
        Returns the modal decomposition of the continuous-time system.

        Raises
        ------
        ConvergenceError
            If the eigen-decomposition fails or if the system is
            ill-conditioned.
        """
        Cn = matrices.capacitances
        if not np.all(Cn > 0.0):
            raise ConvergenceError("node capacities must be positive")
        K = Cn[:, None] * matrices.A
        if not np.allclose(K, K.T, rtol=1.0e-10, atol=0.0):
            raise ConvergenceError("conductance matrix is not symmetric")
        s = np.sqrt(Cn)
        S = K / s[:, None] / s[None, :]
        S = 0.5 * (S + S.T)
        try:
            lam, V = scipy.linalg.eigh(S)
        except (np.linalg.LinAlgError, ValueError) as err:
            raise ConvergenceError(f"eigen-decomposition failed ({err})") from None
        if not (np.all(np.isfinite(lam)) and np.all(lam < 0.0)):
            raise ConvergenceError(
                "system matrix has non-negative or non-finite eigenvalues"
            )
        if np.max(np.abs(lam)) / np.min(np.abs(lam)) > 1.0 / np.finfo(float).eps:
            raise ConvergenceError("system matrix is ill-conditioned")
        residual = np.linalg.norm(S @ V - V * lam) / np.linalg.norm(S)
        if residual > 1.0e-8:
            raise ConvergenceError(
                f"eigen-decomposition is inaccurate (residual {residual:.3g})"
            )
        # slow modes first: eigenvalues closest to zero
        order = np.argsort(-lam)
        lam, V = lam[order], V[:, order]
        T = V / s[:, None]
        T_inv = V.T * s[None, :]
        return ModalDecomposition(
            eigenvalues=lam,
            T=T,
            T_inv=T_inv,
            B=T_inv @ matrices.B,
            C=matrices.C @ T,
            D=matrices.D,
            dt=dt
        )

    @staticmethod
    def truncation_errors(modal: ModalDecomposition) -> np.ndarray:
        """
        Returns for each history order N = 0..n (n the number of modes) the
        relative truncation error: the sum of the magnitudes of the lagged
        response coefficients of the modes that are replaced by their
        steady-state response, divided by the steady-state gain. The maximum
        over the outside, cross and inside series is taken.
        """
        lam, dt, p = modal.eigenvalues, modal.dt, modal.poles
        # sum over j >= 1 of |h_j| of each mode, per unit residue
        lagged = -np.expm1(lam * dt) / (lam ** 2 * dt)
        errors = np.zeros(modal.num_modes + 1)
        for series in _SERIES:
            tail = np.abs(modal.residues(series)) * lagged
            # discarded[N] = sum of tail[N:]
            discarded = np.concatenate((np.cumsum(tail[::-1])[::-1], [0.0]))
            gain = abs(modal.steady_state_gain(series))
            errors = np.maximum(errors, discarded / gain)
        return errors

    def select_order(self, errors: np.ndarray) -> int:
        """Returns the smallest history order N >= 1 whose truncation error
        does not exceed the tolerance.
        """
        candidates = np.nonzero(errors[1:] <= self.tolerance)[0]
        if len(candidates) == 0:
            return len(errors) - 1
        return int(candidates[0]) + 1

    @staticmethod
    def coefficients(modal: ModalDecomposition, N: int, time_step: float) -> CTFCoefficientSet:
        """
        Returns the CTF set with history order N, in the unit system of the
        modal decomposition. The N slowest modes are kept; the remaining modes
        contribute their steady-state response to the coefficient at lag 0.
        """
        lam, p = modal.eigenvalues, modal.poles
        G0, G1 = modal.gammas
        p_kept = p[:N]
        # denominator: prod(1 - p_k * z^-1), coefficients in powers of z^-1
        den = np.atleast_1d(np.poly(p_kept))
        den_k = [np.atleast_1d(np.poly(np.delete(p_kept, k))) for k in range(N)]
        series = {}
        for name in _SERIES:
            r = modal.residues(name)
            d = modal.feedthrough(name) + np.sum(-r[N:] / lam[N:])
            num = d * den
            for k in range(N):
                num = num + r[k] * np.convolve([G1[k], G0[k]], den_k[k])
            series[name] = num
        return CTFCoefficientSet(
            time_step=time_step,
            outside=series['outside'],
            cross=series['cross'],
            inside=series['inside'],
            flux=-den[1:]
        )

    def solve(
        self,
        matrices: StateSpaceMatrices,
        time_step: Quantity | None = None
    ) -> CTFCoefficientSet:
        """
        Calculates the CTF set of a construction.

        Parameters
        ----------
        matrices:
            State-space matrices of the construction.
        time_step:
            Time step of the CTF set. If None, the time step the matrices were
            discretized for is used.

        Returns
        -------
        CTF set in SI units, with its time step in hours.

        Raises
        ------
        ConvergenceError
            If the eigen-decomposition fails or the resulting coefficients are
            not consistent.
        TermLimitExceeded
            If the minimal number of terms that meets the tolerance is larger
            than the maximum number of terms.
        """
        if time_step is None:
            time_step = matrices.time_step
        dt = time_step.to(matrices.unit_system.unit_t).m
        dt_hr = time_step.to('hr').m
        modal = self.decompose(matrices, dt)
        errors = self.truncation_errors(modal)
        N = self.select_order(errors)
        logger.debug(
            f"Construction '{matrices.construction_name}': {modal.num_modes} "
            f"modes, {N} CTF terms, truncation error {errors[N]:.3g}"
        )
        raw = self.coefficients(modal, N, dt_hr)
        validate(raw, self.max_terms)
        check_conservation(raw, matrices, rtol=self.conservation_rtol)
        # back to SI, from the unit system in which the matrices were assembled
        return UnitNormalizer(matrices.unit_system).denormalize(raw)
