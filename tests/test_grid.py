import numpy as np
import pytest

from pylsm.grid import ColumnGrid, ExponentialSpacing, PrescribedSpacing, UniformSpacing
from pylsm.world import ConfigurationError, SimConfig


def test_uniform_grid_geometry():
    grid = ColumnGrid(UniformSpacing(dz=0.5, n=4), n_columns=3)
    assert grid.nz == 4
    assert grid.column_shape == (3, 4)
    assert grid.lateral_shape == (3,)
    np.testing.assert_allclose(grid.z_faces, [0.0, 0.5, 1.0, 1.5, 2.0])
    np.testing.assert_allclose(grid.z_centers, [0.25, 0.75, 1.25, 1.75])
    assert grid.depth == 2.0


def test_exponential_spacing_bounds():
    dz = ExponentialSpacing(dz_min=0.1, dz_max=100.0, n=50).thicknesses()
    assert dz.size == 50
    assert np.isclose(dz[0], 0.1)
    assert np.isclose(dz[-1], 100.0)
    assert np.all(np.diff(dz) >= 0.0)


@pytest.mark.parametrize(
    "spacing",
    [UniformSpacing(dz=0.0), UniformSpacing(n=0), ExponentialSpacing(dz_min=2.0, dz_max=1.0), PrescribedSpacing(dz=(0.1, -0.2))],
)
def test_invalid_spacing_raises(spacing):
    with pytest.raises(ConfigurationError):
        ColumnGrid(spacing)


def test_divergence_of_uniform_flux_vanishes():
    grid = ColumnGrid(PrescribedSpacing(dz=(0.1, 0.3, 0.6)))
    flux = np.full((1, grid.nz + 1), 2.0)
    np.testing.assert_allclose(grid.divergence(flux), 0.0)


def test_interior_divergence_conserves():
    grid = ColumnGrid(PrescribedSpacing(dz=(0.1, 0.3, 0.6)))
    interior = np.array([[1.0, -0.5]])
    div = grid.interior_divergence(interior)
    # Closed edges: the column integral of the tendency is zero
    assert np.isclose(grid.column_integral(div)[0], 0.0)
    # Downward flux out of the top cell drains it
    assert div[0, 0] < 0.0


def test_ddz_linear_profile():
    grid = ColumnGrid(PrescribedSpacing(dz=(0.2, 0.4, 0.8)))
    T = 3.0 * grid.z_centers
    np.testing.assert_allclose(grid.ddz(T), 3.0)


def test_config_from_env_and_grid(monkeypatch):
    monkeypatch.setenv("LSM_NZ", "7")
    monkeypatch.setenv("LSM_N_COLUMNS", "2")
    monkeypatch.setenv("LSM_DT_SECONDS", "123")
    monkeypatch.setenv("LSM_INTEGRATOR", "Heun")
    cfg = SimConfig.from_env()
    assert cfg.nz == 7
    assert cfg.dt_seconds == 123.0
    assert cfg.integrator == "heun"
    grid = cfg.make_grid()
    assert grid.column_shape == (2, 7)


def test_config_bad_env_falls_back(monkeypatch):
    monkeypatch.setenv("LSM_NZ", "many")
    assert SimConfig.from_env().nz == 50
