import numpy as np
import pytest

from pylsm.grid import ColumnGrid, PrescribedSpacing
from pylsm.soil import SoilEnergy, SoilModel
from pylsm.world import (
    XY,
    XYZ,
    CompositeProcess,
    ConfigurationError,
    GroundHeatFlux,
    NoFlux,
    PrescribedFlux,
    PrescribedValue,
    Process,
    build_state,
    input_,
    prognostic,
)
from pylsm.world.boundary import BOTTOM, TOP, edge_index


class Tracer(Process):
    """A passive column tracer moved only by its boundary conditions."""

    def __init__(self, top=NoFlux(), bottom=NoFlux()):
        self.top = top
        self.bottom = bottom

    def variables(self):
        return (prognostic("c", XYZ),) + self.top.variables() + self.bottom.variables()

    def compute_auxiliary(self, state, grid):
        return None

    def compute_tendencies(self, state, grid):
        self.top.apply(state, grid, self, "c", TOP)
        self.bottom.apply(state, grid, self, "c", BOTTOM)


@pytest.fixture
def grid():
    return ColumnGrid(PrescribedSpacing(dz=(0.5, 1.0, 2.0)))


def test_edge_index():
    assert edge_index(TOP) == 0
    assert edge_index(BOTTOM) == -1
    with pytest.raises(ConfigurationError):
        edge_index("side")


def test_top_and_bottom_fluxes_accumulate(grid):
    model = Tracer(top=PrescribedFlux(2.0), bottom=PrescribedFlux(0.5))
    state = build_state(model, grid)
    state.tendency("c")[...] = 1.0
    model.compute_tendencies(state, grid)
    np.testing.assert_allclose(state.tendency("c"), [[1.0 + 2.0 / 0.5, 1.0, 1.0 + 0.5 / 2.0]])


def test_flux_from_input_field(grid):
    model = Tracer(top=PrescribedFlux(input_name="inflow"))
    state = build_state(model, grid)
    assert state.group_of("inflow") == "input"
    state["inflow"] = 3.0
    model.compute_tendencies(state, grid)
    np.testing.assert_allclose(state.tendency("c")[0, 0], 6.0)


def test_no_flux_adds_nothing(grid):
    model = Tracer()
    state = build_state(model, grid)
    model.compute_tendencies(state, grid)
    np.testing.assert_allclose(state.tendency("c"), 0.0)


def test_prescribed_value_uses_half_cell_conduction(grid):
    model = SoilModel(energy=SoilEnergy(top=PrescribedValue(value=4.0)))
    state = build_state(model, grid)
    model.initialize(state, grid)
    state.zero_tendencies()
    model.compute_auxiliary(state, grid)
    model.compute_tendencies(state, grid)
    k0 = state.thermal_conductivity[0, 0]
    expected = k0 * 4.0 / (0.5 * 0.5) / 0.5
    np.testing.assert_allclose(state.tendency("internal_energy")[0, 0], expected)
    np.testing.assert_allclose(state.tendency("internal_energy")[0, 1:], 0.0)


def test_ground_heat_flux_requires_top_and_field(grid):
    model = SoilModel(energy=SoilEnergy(top=GroundHeatFlux()))
    state = build_state(model, grid)
    model.initialize(state, grid)
    with pytest.raises(ConfigurationError):
        model.compute_tendencies(state, grid)
    with pytest.raises(ConfigurationError):
        GroundHeatFlux().apply(state, grid, model.energy, "internal_energy", BOTTOM)


class SurfaceHeating(Tracer):
    """Top flux from a ground heat flux field (positive upward)."""

    def __init__(self):
        super().__init__(top=GroundHeatFlux())

    def variables(self):
        return super().variables() + (input_("ground_heat_flux", XY),)


class Geothermal(Tracer):
    def __init__(self, value=0.06):
        super().__init__(bottom=PrescribedFlux(value))


class TwoSources(CompositeProcess):
    components = ("first", "second")

    def __init__(self, first, second):
        self.first = first
        self.second = second


def _two_source_tendency(model, grid):
    state = build_state(model, grid)
    state["ground_heat_flux"] = -3.0
    state.zero_tendencies()
    model.compute_tendencies(state, grid)
    return state.tendency("c").copy()


@pytest.mark.parametrize("dz", [(0.5, 1.0, 2.0), (2.0,)])
def test_independent_processes_share_one_tendency(dz):
    grid = ColumnGrid(PrescribedSpacing(dz=dz))
    surface_first = _two_source_tendency(TwoSources(SurfaceHeating(), Geothermal()), grid)
    bottom_first = _two_source_tendency(TwoSources(Geothermal(), SurfaceHeating()), grid)
    np.testing.assert_array_equal(surface_first, bottom_first)

    expected = np.zeros((1, len(dz)))
    expected[0, 0] += 3.0 / dz[0]
    expected[0, -1] += 0.06 / dz[-1]
    np.testing.assert_allclose(surface_first, expected)
