"""
Prescribed near-surface atmosphere.

All meteorological forcing enters as lateral input fields, filled by input
sources (time series, functions) before every step:

    air_temperature (°C), air_pressure (Pa), specific_humidity (kg/kg),
    shortwave_down / longwave_down (W/m^2), co2 (ppm), rainfall (m/s),
    windspeed (m/s)

The only diagnostic is the vapour pressure deficit used by stomatal
conductance.
"""

from __future__ import annotations

from dataclasses import dataclass

from pylsm.constants import vapor_pressure_deficit
from pylsm.world.process import Process
from pylsm.world.variables import XY, auxiliary, input_


@dataclass(frozen=True)
class PrescribedAtmosphere(Process):
    air_temperature: float = 10.0
    air_pressure: float = 101325.0
    specific_humidity: float = 0.005
    shortwave_down: float = 200.0
    longwave_down: float = 300.0
    co2: float = 400.0
    rainfall: float = 0.0
    windspeed: float = 3.0

    def variables(self):
        return (
            input_("air_temperature", XY, default=self.air_temperature, units="°C"),
            input_("air_pressure", XY, default=self.air_pressure, units="Pa"),
            input_("specific_humidity", XY, default=self.specific_humidity, units="kg/kg"),
            input_("shortwave_down", XY, default=self.shortwave_down, units="W/m^2"),
            input_("longwave_down", XY, default=self.longwave_down, units="W/m^2"),
            input_("co2", XY, default=self.co2, units="ppm"),
            input_("rainfall", XY, default=self.rainfall, units="m/s"),
            input_("windspeed", XY, default=self.windspeed, units="m/s"),
            auxiliary("vapor_pressure_deficit", XY, units="Pa"),
        )

    def compute_auxiliary(self, state, grid):
        state["vapor_pressure_deficit"] = vapor_pressure_deficit(
            state.air_temperature, state.specific_humidity, state.air_pressure
        )

    def compute_tendencies(self, state, grid):
        """Forcing only."""
        return None
