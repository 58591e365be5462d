from __future__ import annotations

from typing import Iterable, TextIO
from ctf_calc.construction import Construction, MaterialLayer


HEADER_LINES = (
    "! <Construction CTF>,Construction Name,Index,#Layers,#CTFs,Time Step {hours},"
    "ThermalConductance {w/m2-K},OuterThermalAbsorptance,InnerThermalAbsorptance,"
    "OuterSolarAbsorptance,InnerSolarAbsorptance,Roughness",
    "! <Material CTF Summary>,Material Name,Thickness {m},Conductivity {w/m-K},"
    "Density {kg/m3},Specific Heat {J/kg-K},ThermalResistance {m2-K/w}",
    "! <Material:Air>,Material Name,ThermalResistance {m2-K/w}",
    "! <CTF>,Time,Outside,Cross,Inside,Flux (except final one)"
)


class ReportWriter:
    """
    Writes the CTF report of a collection of constructions to a text stream.

    Parameters
    ----------
    stream:
        Text stream (e.g. a file opened in append mode) the report is written
        to.
    report_requested:
        True if the user asked for the report of the constructions. The
        report is also written when the CTF calculation of a construction
        failed (see `report()`).
    """
    def __init__(self, stream: TextIO, report_requested: bool = False) -> None:
        self.stream = stream
        self.report_requested = report_requested

    def report(
        self,
        constructions: Iterable[Construction],
        write_detailed_report: bool = False
    ) -> bool:
        """
        Writes the header lines, followed by the summary, layers and CTF
        coefficients of each used construction. Returns True if the report
        was written.

        Parameters
        ----------
        constructions:
            All constructions, in their original order. Unused constructions
            are skipped, but they still count in the construction index.
        write_detailed_report:
            Write the report even if it was not requested, because at least one
            construction failed.
        """
        if not (self.report_requested or write_detailed_report):
            return False
        for line in HEADER_LINES:
            self._write(line)
        for index, construction in enumerate(constructions, start=1):
            if not construction.is_used:
                continue
            self.report_construction(construction, index)
        self.stream.flush()
        return True

    def report_construction(self, construction: Construction, index: int) -> None:
        ctf = construction.ctf
        if ctf is None:
            error = construction.ctf_error
            reason = f"{error.condition}: {error.message}" if error is not None else 'not calculated'
            self._write(
                f" Construction CTF,{construction.name},{index:4d},"
                f"{construction.num_layers:4d},** ERROR **,{reason.replace(',', ';')}"
            )
        else:
            self._write(
                f" Construction CTF,{construction.name},{index:4d},"
                f"{construction.num_layers:4d},{ctf.num_terms:4d},"
                f"{ctf.time_step:8.3f},"
                f"{construction.thermal_conductance.to('W / (m ** 2 * K)').m:15.4G},"
                f"{construction.outside_thermal_absorptance:8.3f},"
                f"{construction.inside_thermal_absorptance:8.3f},"
                f"{construction.outside_solar_absorptance:8.3f},"
                f"{construction.inside_solar_absorptance:8.3f},"
                f"{construction.outside_roughness.value}"
            )
        for layer in construction.layers:
            self._write(self._layer_line(layer))
        if ctf is None:
            return
        # from the oldest term down to the current time; the flux history has
        # no coefficient at lag 0
        for j in range(ctf.num_terms, -1, -1):
            line = (
                f" CTF,{j:4d},{ctf.outside[j]:20.8G},{ctf.cross[j]:20.8G},"
                f"{ctf.inside[j]:20.8G}"
            )
            if j > 0:
                line += f",{ctf.flux[j - 1]:20.8G}"
            self._write(line)

    @staticmethod
    def _layer_line(layer: MaterialLayer) -> str:
        R = layer.resistance.to('m ** 2 * K / W').m
        if layer.is_no_mass:
            return f" Material:Air,{layer.name},{R:12.4G}"
        return (
            f" Material CTF Summary,{layer.name},"
            f"{layer.t.to('m').m:8.4f},"
            f"{layer.k.to('W / (m * K)').m:14.3f},"
            f"{layer.rho.to('kg / m ** 3').m:11.3f},"
            f"{layer.c.to('J / (kg * K)').m:13.3f},"
            f"{R:12.4G}"
        )

    def _write(self, line: str) -> None:
        self.stream.write(line + '\n')
