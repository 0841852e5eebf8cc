from restful_openapi.generator.pruning import build_reference_graph, collect_refs, prune_components, reachable


def _ref(name: str) -> dict:
    return {"$ref": f"#/components/schemas/{name}"}


SCHEMAS = {
    "A": {"type": "object", "properties": {"b": _ref("B")}},
    "B": {"allOf": [_ref("C"), {"type": "object"}]},
    "C": {"type": "string"},
    "Orphan": {"properties": {"a": _ref("A")}},
    "Cycle1": {"properties": {"next": _ref("Cycle2")}},
    "Cycle2": {"properties": {"next": _ref("Cycle1")}},
}


class TestCollectRefs:
    def test_first_seen_order_without_duplicates(self):
        value = {"x": [_ref("B"), {"y": _ref("A")}, _ref("B")]}
        assert collect_refs(value) == ["B", "A"]

    def test_ignores_parameter_refs(self):
        assert collect_refs({"parameters": [{"$ref": "#/components/parameters/id"}]}) == []


class TestReachability:
    def test_graph(self):
        graph = build_reference_graph(SCHEMAS)
        assert graph["A"] == ["B"]
        assert graph["C"] == []

    def test_handles_cycles(self):
        graph = build_reference_graph(SCHEMAS)
        assert reachable(["Cycle1"], graph) == {"Cycle1", "Cycle2"}

    def test_unknown_root_is_tolerated(self):
        assert reachable(["Missing"], {}) == {"Missing"}


class TestPruneComponents:
    def test_keeps_transitive_references(self):
        paths = {"/a": {"get": {"responses": {"200": {"content": {"x": {"schema": _ref("A")}}}}}}}
        assert list(prune_components(paths, SCHEMAS)) == ["A", "B", "C"]

    def test_keeps_original_order(self):
        paths = {"/x": {"get": {"schema": _ref("C")}, "post": {"schema": _ref("Cycle2")}}}
        assert list(prune_components(paths, SCHEMAS)) == ["C", "Cycle1", "Cycle2"]

    def test_idempotent(self):
        paths = {"/a": {"get": {"schema": _ref("B")}}}
        once = prune_components(paths, SCHEMAS)
        assert prune_components(paths, once) == once

    def test_does_not_mutate_input(self):
        schemas = dict(SCHEMAS)
        prune_components({}, schemas)
        assert schemas == SCHEMAS

    def test_nothing_referenced(self):
        assert prune_components({}, SCHEMAS) == {}
