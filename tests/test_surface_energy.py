import logging
from dataclasses import dataclass, field

import numpy as np
import pytest

from pylsm.constants import PhysicalConstants
from pylsm.grid import ColumnGrid, PrescribedSpacing
from pylsm.surface import (
    ConstantAlbedo,
    ImplicitSkinTemperature,
    PrescribedAtmosphere,
    PrescribedSkinTemperature,
    SurfaceEnergyBalance,
    surface_energy_balance_from_env,
)
from pylsm.world import CompositeProcess, ConfigurationError, Process, build_state


@dataclass(frozen=True)
class Surface(CompositeProcess):
    atmosphere: Process = field(default_factory=PrescribedAtmosphere)
    seb: Process = field(default_factory=SurfaceEnergyBalance)

    components = ("atmosphere", "seb")


def _grid(dz0=0.01):
    return ColumnGrid(PrescribedSpacing(dz=(dz0, 0.1, 1.0)), n_columns=3)


def _solved_state(model, grid, ground_temperature=(-5.0, 0.0, 15.0)):
    state = build_state(model, grid)
    if "ground_temperature" in state:
        state["ground_temperature"] = np.asarray(ground_temperature)
    model.compute_auxiliary(state, grid)
    return state


@pytest.mark.parametrize("dz0", [0.01, 0.5])
def test_newton_satisfies_half_cell_conduction(dz0):
    grid = _grid(dz0)
    state = _solved_state(Surface(), grid)
    residual = state.skin_temperature - state.ground_temperature + state.ground_heat_flux * dz0 / (2.0 * 2.0)
    np.testing.assert_allclose(residual, 0.0, atol=1e-5)


def test_ground_heat_flux_is_sum_of_surface_fluxes():
    state = _solved_state(Surface(), _grid())
    np.testing.assert_allclose(
        state.ground_heat_flux,
        state.surface_net_radiation + state.sensible_heat_flux + state.latent_heat_flux,
    )


def test_picard_agrees_with_newton_on_thin_cell():
    grid = _grid(0.01)
    newton = _solved_state(Surface(), grid)
    picard_seb = SurfaceEnergyBalance(skin_temperature=ImplicitSkinTemperature(method="picard", max_iter=200))
    picard = _solved_state(Surface(seb=picard_seb), grid)
    np.testing.assert_allclose(picard.skin_temperature, newton.skin_temperature, atol=1e-4)


def test_warm_ground_heats_the_air():
    state = _solved_state(Surface(), _grid(), ground_temperature=(30.0, 30.0, 30.0))
    # Air at 10 °C: the skin stays close to the ground and loses sensible heat upward
    assert np.all(state.skin_temperature > 10.0)
    assert np.all(state.sensible_heat_flux > 0.0)


def test_non_convergence_is_logged(caplog):
    seb = SurfaceEnergyBalance(skin_temperature=ImplicitSkinTemperature(max_iter=1, tol=1e-14))
    with caplog.at_level(logging.WARNING, logger="pylsm"):
        state = _solved_state(Surface(seb=seb), _grid())
    assert "not converged" in caplog.text
    assert np.all(np.isfinite(state.skin_temperature))


def test_unknown_solver_rejected():
    seb = SurfaceEnergyBalance(skin_temperature=ImplicitSkinTemperature(method="bisection"))
    with pytest.raises(ConfigurationError):
        _solved_state(Surface(seb=seb), _grid())


def test_radiative_equilibrium_with_prescribed_skin():
    c = PhysicalConstants()
    T_s = 5.0
    atmosphere = PrescribedAtmosphere(
        shortwave_down=0.0,
        longwave_down=c.stefan_boltzmann(c.celsius_to_kelvin(T_s), 1.0),
        air_temperature=T_s,
    )
    seb = SurfaceEnergyBalance(
        albedo=ConstantAlbedo(albedo=0.0, emissivity=1.0),
        skin_temperature=PrescribedSkinTemperature(),
    )
    model = Surface(atmosphere=atmosphere, seb=seb)
    grid = _grid()
    state = build_state(model, grid)
    state["skin_temperature"] = T_s
    model.compute_auxiliary(state, grid)
    np.testing.assert_allclose(state.surface_net_radiation, 0.0, atol=1e-9)
    np.testing.assert_allclose(state.sensible_heat_flux, 0.0, atol=1e-12)
    np.testing.assert_allclose(
        state.ground_heat_flux, state.latent_heat_flux, rtol=1e-12,
    )


def test_seb_from_env(monkeypatch):
    monkeypatch.setenv("LSM_ALBEDO", "0.15")
    monkeypatch.setenv("LSM_AERODYNAMIC_RESISTANCE", "80")
    monkeypatch.setenv("LSM_SKIN_MAX_ITER", "many")
    seb = surface_energy_balance_from_env()
    assert seb.albedo.albedo == 0.15
    assert seb.albedo.emissivity == 0.97
    assert seb.turbulent_fluxes.aerodynamic_resistance == 80.0
    assert seb.skin_temperature.max_iter == 50
