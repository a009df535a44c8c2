"""Build a model from namespaced parts.

Two copies of a reversible binding module are attached to an isomerization
core with ``compose``; ``flatten`` then merges everything into one system
with prefixed names (``left.X``, ``right.XY``, ...).

Run:
    python examples/compose_and_flatten.py
"""

from __future__ import annotations

from crn_structure import (
    NetworkAnalyzer,
    compose,
    extend,
    flatten,
    isomerization_network,
    reversible_binding_network,
)


def main() -> None:
    core = isomerization_network()
    left = reversible_binding_network().copy(name="left")
    right = reversible_binding_network().copy(name="right")

    model = compose(core, left, right, name="model")
    print(model)
    print("Subsystems:", [c.name for c in model.systems])

    flat = flatten(model)
    print(flat)
    print("Species:", flat.species_names)
    for rx in flat.reactions:
        print("  ", rx)

    an = NetworkAnalyzer(flat)
    print("Linkage classes:", len(an.linkage_classes()))
    print("Deficiency:", an.deficiency())
    print("Conserved:", an.conserved_quantities())

    # extend, by contrast, merges namespaces directly.
    merged = extend(core, reversible_binding_network(), name="merged")
    print(merged, merged.species_names)


if __name__ == "__main__":
    main()
