"""
Calculates the conduction transfer functions of all constructions of a
building model, writes the CTF report and stops with a fatal error if the
calculation of any construction failed.

Constructions are independent of each other and are solved in parallel in
a thread pool. Each task writes its outcome into its own, pre-allocated slot
of the batch result, so that the report follows the original order of the
constructions regardless of the order in which the tasks finish.
"""
from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, TextIO
from ctf_calc.logging import ModuleLogger
from ctf_calc.construction import Construction
from ctf_calc.exceptions import CTFCalculationError, CTFInitializationError
from ctf_calc.thermal_models.construction_model import discretize
from .coefficients import CTFCoefficientSet
from .settings import CTFSettings
from .solver import TransferFunctionSolver
from .report import ReportWriter

logger = ModuleLogger.get_logger(__name__, log_level=ModuleLogger.INFO)


@dataclass
class SolveOutcome:
    """Result of the CTF calculation of a single construction: either a CTF
    set or the error that made the calculation fail.
    """
    index: int
    construction: Construction
    ctf: CTFCoefficientSet | None = None
    error: CTFCalculationError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Outcomes of the CTF calculation of a collection of constructions, in
    the order of the collection.
    """
    outcomes: list[SolveOutcome] = field(default_factory=list)

    @property
    def errors_found(self) -> bool:
        return any(not outcome.succeeded for outcome in self.outcomes)

    @property
    def write_detailed_report(self) -> bool:
        """A failed construction makes the CTF report necessary, even if the
        user didn't ask for it.
        """
        return self.errors_found

    @property
    def failures(self) -> list[SolveOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def successes(self) -> list[SolveOutcome]:
        return [outcome for outcome in self.outcomes if outcome.succeeded]


def solve_construction(
    construction: Construction,
    settings: CTFSettings | None = None
) -> CTFCoefficientSet:
    """
    Discretizes a construction and returns its CTF set.

    Raises
    ------
    CTFCalculationError
        `DiscretizationError`, `ConvergenceError` or `TermLimitExceeded`.
    """
    settings = settings or CTFSettings()
    matrices = discretize(
        construction,
        time_step=settings.time_step,
        normalizer=settings.normalizer,
        node_spacing_factor=settings.node_spacing_factor,
        max_total_nodes=settings.max_total_nodes
    )
    solver = TransferFunctionSolver(
        tolerance=settings.tolerance,
        max_terms=settings.max_terms
    )
    return solver.solve(matrices)


def calculate_transfer_functions(
    constructions: Sequence[Construction],
    settings: CTFSettings | None = None
) -> BatchResult:
    """
    Calculates the CTF set of every construction. A failing construction
    does not stop the calculation of the others. After all constructions have
    been attempted, each construction gets either its CTF set (attribute
    `ctf`) or the error (attribute `ctf_error`).

    Returns
    -------
    `BatchResult` with the outcomes in the order of `constructions`.
    """
    settings = settings or CTFSettings()
    slots: list[SolveOutcome | None] = [None] * len(constructions)

    def _task(i: int) -> None:
        construction = constructions[i]
        try:
            ctf = solve_construction(construction, settings)
        except CTFCalculationError as err:
            err.construction_name = construction.name
            slots[i] = SolveOutcome(i + 1, construction, error=err)
        except Exception:
            logger.exception(
                f"Construction '{construction.name}' (#{i + 1}): unexpected "
                f"error, the CTF calculation is aborted"
            )
            raise
        else:
            slots[i] = SolveOutcome(i + 1, construction, ctf=ctf)

    if settings.num_workers == 1:
        for i in range(len(constructions)):
            _task(i)
    else:
        with ThreadPoolExecutor(max_workers=settings.num_workers) as executor:
            # consuming the iterator re-raises any unexpected exception
            list(executor.map(_task, range(len(constructions))))

    batch = BatchResult(outcomes=list(slots))
    for outcome in batch.outcomes:
        outcome.construction.ctf = outcome.ctf
        outcome.construction.ctf_error = outcome.error
        if outcome.error is not None:
            logger.error(
                f"Construction '{outcome.construction.name}' "
                f"(#{outcome.index}): {outcome.error.condition}: "
                f"{outcome.error.message}"
            )
    logger.info(
        f"CTFs calculated for {len(batch.successes)} of "
        f"{len(batch.outcomes)} constructions."
    )
    return batch


def run(
    constructions: Sequence[Construction],
    settings: CTFSettings | None = None,
    report_file: TextIO | Path | str | None = None,
    log_file: Path | str | None = None
) -> BatchResult:
    """
    Calculates the CTF sets of all constructions and writes the CTF report.

    Parameters
    ----------
    constructions:
        All constructions of the building model, in their original order.
    settings:
        Settings of the CTF calculation.
    report_file:
        Text stream or path of the report file. A path is opened in append
        mode, and only if the report is requested in `settings` or errors
        were found. By default the report is written to `sys.stdout`.
    log_file:
        Optional path of a file to which the log messages of the CTF
        calculation are appended as well.

    Returns
    -------
    `BatchResult` with the outcome of each construction, if all
    constructions were solved.

    Raises
    ------
    CTFInitializationError
        After the report has been written, if the calculation of at least one
        construction failed.
    """
    settings = settings or CTFSettings()
    with ExitStack() as stack:
        if log_file is not None:
            stack.enter_context(ModuleLogger.logging_to_file(logger, log_file))
        batch = calculate_transfer_functions(constructions, settings)
        report_needed = settings.report_constructions or batch.write_detailed_report
        if not isinstance(report_file, (str, Path)):
            _write_report(report_file or sys.stdout, constructions, settings, batch)
        elif report_needed:
            # a report file is only created if there is something to report
            with open(report_file, 'a', encoding='utf-8') as fh:
                _write_report(fh, constructions, settings, batch)
        if batch.errors_found:
            error = CTFInitializationError(batch)
            logger.critical(f"{error} - {len(batch.failures)} construction(s) failed.")
            raise error
        return batch


def _write_report(
    stream: TextIO,
    constructions: Sequence[Construction],
    settings: CTFSettings,
    batch: BatchResult
) -> None:
    writer = ReportWriter(stream, report_requested=settings.report_constructions)
    writer.report(constructions, write_detailed_report=batch.write_detailed_report)
