import pytest

from pylsm import LandModel
from pylsm.grid import ColumnGrid, UniformSpacing
from pylsm.soil import SoilModel
from pylsm.vegetation import VegetationModel
from pylsm.world import build_state

HOOKS = ("initialize", "compute_auxiliary", "compute_tendencies")


def record_calls(monkeypatch, model):
    """Log (hook, child name) for every hook call into a direct child of `model`."""
    log = []
    for name, child in model.children():
        cls = type(child)
        for hook in HOOKS:
            original = getattr(cls, hook)

            def recorder(self, state, grid, _original=original, _name=name, _hook=hook):
                log.append((_hook, _name))
                return _original(self, state, grid)

            monkeypatch.setattr(cls, hook, recorder)
    return log


def call_sequences(model, grid, log, **fields):
    """Child names per hook, for one initialize, auxiliary and tendency pass."""
    state = build_state(model, grid)
    for name, value in fields.items():
        state[name] = value
    sequences = {}
    model.initialize(state, grid)
    # Children may refresh their own diagnostics while initializing
    sequences["initialize"] = [name for hook, name in log if hook == "initialize"]
    log.clear()
    state.zero_tendencies()
    model.compute_auxiliary(state, grid)
    sequences["compute_auxiliary"] = list(log)
    log.clear()
    model.compute_tendencies(state, grid)
    sequences["compute_tendencies"] = list(log)
    return sequences


@pytest.fixture
def grid():
    return ColumnGrid(UniformSpacing(dz=0.25, n=4), n_columns=2)


def test_vegetation_call_order(monkeypatch, grid):
    model = VegetationModel()
    log = record_calls(monkeypatch, model)
    seq = call_sequences(model, grid, log, C_veg=5.0, vegetation_area_fraction=0.5)
    children = [
        "carbon_dynamics",
        "phenology",
        "root_distribution",
        "stomatal_conductance",
        "photosynthesis",
        "autotrophic_respiration",
        "vegetation_dynamics",
    ]
    assert seq["initialize"] == children
    assert seq["compute_auxiliary"] == [("compute_auxiliary", name) for name in children]
    assert seq["compute_tendencies"] == [
        ("compute_tendencies", "carbon_dynamics"),
        ("compute_tendencies", "vegetation_dynamics"),
    ]


def test_soil_call_order(monkeypatch, grid):
    model = SoilModel()
    log = record_calls(monkeypatch, model)
    seq = call_sequences(model, grid, log, temperature=2.0)
    physics = ["stratigraphy", "hydrology", "biogeochemistry", "energy"]
    assert seq["initialize"] == physics
    assert seq["compute_auxiliary"] == [("compute_auxiliary", name) for name in physics]
    assert seq["compute_tendencies"] == [("compute_tendencies", name) for name in physics]


def test_land_call_order(monkeypatch, grid):
    model = LandModel()
    log = record_calls(monkeypatch, model)
    seq = call_sequences(model, grid, log, temperature=5.0, C_veg=5.0, vegetation_area_fraction=0.5)
    coupling = ["atmosphere", "soil", "surface_energy_balance", "vegetation", "surface_hydrology"]
    assert seq["initialize"] == coupling
    assert seq["compute_auxiliary"] == [("compute_auxiliary", name) for name in coupling]
    assert seq["compute_tendencies"] == [
        ("compute_tendencies", "vegetation"),
        ("compute_tendencies", "surface_hydrology"),
        ("compute_tendencies", "soil"),
    ]


def test_land_without_optional_components_skips_them(monkeypatch, grid):
    model = LandModel(vegetation=None, surface_hydrology=None)
    log = record_calls(monkeypatch, model)
    seq = call_sequences(model, grid, log, temperature=5.0)
    assert seq["initialize"] == ["atmosphere", "soil", "surface_energy_balance"]
    assert seq["compute_tendencies"] == [("compute_tendencies", "soil")]
