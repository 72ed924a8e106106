"""
Tests for building weights from structured configuration.
"""

import pytest
import yaml

from lattice_tester import (
    OrderDependentWeights,
    PODWeights,
    ProductWeights,
    ProjectionDependentWeights,
    create_weights,
    load_weights,
)
from lattice_tester.errors import MalformedConfiguration

POD_NODE = {
    "pod": {
        "order-dependent": {"default": 0.0, "weights": {1: 2.0, 2: 0.5}},
        "product": {"weights": {3: 4.0}},
    }
}


def test_pod_from_dict():
    w = create_weights(POD_NODE)
    assert isinstance(w, PODWeights)
    assert w.get_weight([3]) == pytest.approx(8.0)
    assert w.get_weight([1, 2, 3]) == 0.0


@pytest.mark.parametrize("missing", ["order-dependent", "product"])
def test_pod_requires_both_parts(missing):
    node = {"pod": dict(POD_NODE["pod"])}
    del node["pod"][missing]
    with pytest.raises(MalformedConfiguration, match=missing):
        create_weights(node)


def test_bare_tables():
    assert isinstance(create_weights({"product": {1: 0.5}}), ProductWeights)
    w = create_weights({"order-dependent": [1.0, 0.8, 0.6]})
    assert isinstance(w, OrderDependentWeights)
    assert w.get_weight([5, 6]) == 0.6


def test_projection_dependent():
    w = create_weights({"projection-dependent": {
        "default": 0.0,
        "weights": [{"coordinates": [1, 2], "weight": 0.3}],
    }})
    assert isinstance(w, ProjectionDependentWeights)
    assert w.get_weight([2, 1]) == 0.3
    assert w.get_weight([4]) == 0.0


@pytest.mark.parametrize("node", [
    {"lattice": {}},
    {"product": {1: "heavy"}},
    {"product": {1: -0.5}},
    {"product": {1: 1.0}, "pod": {}},
    {"projection-dependent": [{"coordinates": [0], "weight": 1.0}]},
    "product",
])
def test_malformed(node):
    with pytest.raises(MalformedConfiguration):
        create_weights(node)


def test_load_yaml(tmp_path):
    path = tmp_path / "weights.yaml"
    path.write_text(yaml.dump(POD_NODE, default_flow_style=False))
    w = load_weights(path)
    assert w.get_weight([3]) == pytest.approx(8.0)
