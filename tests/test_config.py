"""
Tests for test configurations.
"""

import math

import pytest
import yaml

from lattice_tester import CriterionType, LatticeTesterConfig, NormaType, load_config
from lattice_tester.errors import MalformedConfiguration

LCG = {"basis": [[1, 12], [0, 101]], "fact": 0.99, "block_size": 2}
LCG_MERIT = math.sqrt(89.0) / math.sqrt(2.0 / math.sqrt(3.0) * 101.0)


def test_defaults():
    config = LatticeTesterConfig.from_dict(LCG)
    assert config.normalizer == NormaType.BESTLAT
    assert config.dual is False
    assert config.criterion == CriterionType.SPECTRAL


def test_run():
    assert LatticeTesterConfig.from_dict(LCG).run() == pytest.approx(LCG_MERIT)


def test_dual():
    config = LatticeTesterConfig.from_dict(dict(LCG, dual=True))
    assert config.build_basis().vectors.tolist() == [[101, 0], [-12, 1]]
    # (5, 8) is a shortest dual vector: 5 + 12 * 8 = 101
    merit = config.run()
    assert merit == pytest.approx(math.sqrt(89.0) / math.sqrt(2.0 / math.sqrt(3.0) * 101.0))


def test_dimension_test_with_weights():
    config = LatticeTesterConfig.from_dict(dict(
        LCG, min_dim=1, max_dim=2, aggregate="sum",
        weights={"order-dependent": {1: 0.5, 2: 1.0}},
    ))
    assert config.run() == pytest.approx(0.5 + LCG_MERIT)


def test_interrupted_run_returns_none():
    assert LatticeTesterConfig.from_dict(dict(LCG, max_nodes=1)).run() is None


@pytest.mark.parametrize("raw", [
    {"norm": "l2"},
    dict(LCG, normalizer="best"),
    dict(LCG, aggregate="max"),
    dict(LCG, criterion="beyer"),
    dict(LCG, min_dim=1),
    dict(LCG, block_size="twenty"),
    [[1, 0], [0, 1]],
])
def test_malformed(raw):
    with pytest.raises(MalformedConfiguration):
        LatticeTesterConfig.from_dict(raw)


def test_unknown_keys_are_kept(tmp_path):
    path = tmp_path / "lcg.yaml"
    path.write_text(yaml.dump(dict(LCG, name="lcg-101"), default_flow_style=False))
    config = load_config(path)
    assert config.metadata == {"name": "lcg-101"}
    assert config.run() == pytest.approx(LCG_MERIT)


def test_dual_dimension_test_dualizes_each_projection():
    config = LatticeTesterConfig.from_dict({
        "basis": [[1, 12, 43], [0, 101, 0], [0, 0, 101]],
        "dual": True, "min_dim": 2, "max_dim": 2, "fact": 0.99, "block_size": 2,
    })
    assert config.build_basis().vectors.tolist() == [[1, 12, 43], [0, 101, 0], [0, 0, 101]]
    assert config.run() == pytest.approx(LCG_MERIT)
