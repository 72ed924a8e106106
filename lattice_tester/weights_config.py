"""
Construction of weights from structured configuration.

A weight node is a mapping with exactly one key naming the kind of weights:

    pod:
      order-dependent:
        default: 0.0
        weights: {1: 2.0, 2: 0.5}
      product:
        weights: {3: 4.0}

Order-dependent and product nodes accept either ``{default, weights}`` or a
bare table. Projection-dependent weights are a list of
``{coordinates: [...], weight: w}`` items, optionally with a ``default``.
"""

from typing import Any, Dict

import yaml

from .errors import MalformedConfiguration
from .weights import (
    OrderDependentWeights,
    PODWeights,
    ProductWeights,
    ProjectionDependentWeights,
    Weights,
)

WEIGHT_KINDS = ("order-dependent", "product", "pod", "projection-dependent")


def _split_table(node, kind: str):
    if node is None:
        return {}, None
    if isinstance(node, list):
        return node, None
    if not isinstance(node, dict):
        raise MalformedConfiguration(f"<{kind}> must be a mapping, got {node!r}")
    if "weights" in node or "default" in node:
        unknown = set(node) - {"weights", "default"}
        if unknown:
            raise MalformedConfiguration(f"<{kind}> has unknown keys {sorted(unknown)}")
        return node.get("weights") or {}, node.get("default")
    return node, None


def _order_dependent(node) -> OrderDependentWeights:
    table, default = _split_table(node, "order-dependent")
    try:
        if isinstance(table, list):
            return OrderDependentWeights(table, default=default)
        return OrderDependentWeights(
            {int(k): float(v) for k, v in table.items()}, default=default
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedConfiguration(f"<order-dependent>: {e}") from e


def _product(node) -> ProductWeights:
    table, default = _split_table(node, "product")
    try:
        return ProductWeights(
            {int(k): float(v) for k, v in table.items()},
            default=1.0 if default is None else default,
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedConfiguration(f"<product>: {e}") from e


def _pod(node) -> PODWeights:
    if not isinstance(node, dict):
        raise MalformedConfiguration(f"<pod> must be a mapping, got {node!r}")
    for child in ("order-dependent", "product"):
        if child not in node:
            raise MalformedConfiguration(f"missing <{child}> element in <pod>")
    return PODWeights(_order_dependent(node["order-dependent"]),
                      _product(node["product"]))


def _projection_dependent(node) -> ProjectionDependentWeights:
    default = None
    items = node
    if isinstance(node, dict):
        default = node.get("default")
        items = node.get("weights", [])
    if not isinstance(items, list):
        raise MalformedConfiguration(
            f"<projection-dependent> weights must be a list, got {items!r}"
        )
    try:
        weights = ProjectionDependentWeights(default=default)
    except (TypeError, ValueError) as e:
        raise MalformedConfiguration(f"<projection-dependent>: {e}") from e
    for item in items:
        try:
            weights.set_weight(item["coordinates"], item["weight"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedConfiguration(
                f"<projection-dependent> bad item {item!r}: {e}"
            ) from e
    return weights


_BUILDERS = {
    "order-dependent": _order_dependent,
    "product": _product,
    "pod": _pod,
    "projection-dependent": _projection_dependent,
}


def create_weights(node: Dict[str, Any]) -> Weights:
    """
    Create weights from a configuration node.

    Parameters
    ----------
    node : dict
        Mapping with exactly one key among ``WEIGHT_KINDS``.

    Returns
    -------
    Weights
        The configured weights.

    Raises
    ------
    MalformedConfiguration
        If the kind is unknown, a required element is missing or a value
        is not a valid weight.
    """
    if not isinstance(node, dict) or len(node) != 1:
        raise MalformedConfiguration(
            f"Weights node must have exactly one of {WEIGHT_KINDS}, got {node!r}"
        )
    (kind, body), = node.items()
    if kind not in _BUILDERS:
        raise MalformedConfiguration(
            f"Unknown weights kind '{kind}'. Must be one of {WEIGHT_KINDS}"
        )
    return _BUILDERS[kind](body)


def load_weights(path) -> Weights:
    """Load weights from a YAML file."""
    with open(path) as f:
        return create_weights(yaml.safe_load(f))
