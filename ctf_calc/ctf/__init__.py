from .coefficients import CTFCoefficientSet
from .settings import CTFSettings
from .validator import validate, check_conservation
from .solver import ModalDecomposition, TransferFunctionSolver
from .report import ReportWriter, HEADER_LINES
from .driver import (
    SolveOutcome,
    BatchResult,
    solve_construction,
    calculate_transfer_functions,
    run
)
