from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ctf_calc.ctf.driver import BatchResult


class CTFCalculationError(Exception):
    """Base class of the errors that make the CTF calculation of a single
    construction fail. These errors are recorded against the construction;
    they don't stop the calculation of other constructions.
    """
    condition = 'CTF calculation failed'

    def __init__(self, message: str, construction_name: str = '') -> None:
        super().__init__(message)
        self.message = message
        self.construction_name = construction_name

    def __str__(self):
        if self.construction_name:
            return f"Construction '{self.construction_name}': {self.message}"
        return self.message


class DiscretizationError(CTFCalculationError):
    """Raised if a construction can't be turned into a dynamic state-space
    system, e.g. when it has no layer with thermal capacity.
    """
    condition = 'construction cannot be discretized'


class ConvergenceError(CTFCalculationError):
    """Raised if the eigen-decomposition of the system matrix fails or
    returns an ill-conditioned solution.
    """
    condition = 'eigen-decomposition did not converge'


class TermLimitExceeded(CTFCalculationError):
    """Raised if the number of CTF terms needed to represent the response of
    a construction is larger than the maximum number of terms allowed.
    """
    condition = 'too many CTF terms'

    def __init__(
        self,
        required_terms: int,
        max_terms: int,
        construction_name: str = ''
    ) -> None:
        self.required_terms = required_terms
        self.max_terms = max_terms
        message = (
            f"{required_terms} CTF terms are required, but the maximum "
            f"is {max_terms} (exceeded by {required_terms - max_terms})"
        )
        super().__init__(message, construction_name)


class CTFInitializationError(Exception):
    """Fatal error raised after all constructions have been attempted and the
    CTF report has been written, if the calculation of at least one
    construction failed.
    """
    stage = 'init_conduction_transfer_functions'

    def __init__(self, batch_result: BatchResult) -> None:
        self.batch_result = batch_result
        super().__init__(
            f"Program terminated for reasons listed ({self.stage})"
        )
