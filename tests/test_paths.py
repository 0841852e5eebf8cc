from pathlib import Path
from unittest.mock import MagicMock

from restful_openapi.generator.filters import FilterParameterBuilder
from restful_openapi.generator.paths import PathBuilder, lower_case_first, operation_security
from restful_openapi.generator.types import TypeMapper
from restful_openapi.model.base import PolicyResult, ResourceMeta
from restful_openapi.model.loader import load_model
from restful_openapi.model.policy import analyze_policies

FIXTURES = Path(__file__).parent / "fixtures"


def _builder(analyze=analyze_policies, **kwargs) -> PathBuilder:
    graph = load_model(FIXTURES / "blog.yaml")
    filters = FilterParameterBuilder(graph, TypeMapper(graph))
    included = {e.name: e for e in graph.entities if not e.ignored}
    return PathBuilder(filters, analyze, included, **kwargs)


def _paths(entity_name: str, **kwargs) -> dict:
    builder = _builder(**kwargs)
    return builder.build(builder.graph.entity(entity_name))


class TestHelpers:
    def test_lower_case_first(self):
        assert lower_case_first("User") == "user"
        assert lower_case_first("post_Item") == "post_Item"
        assert lower_case_first("") == ""

    def test_operation_security(self):
        assert operation_security(None, False) is None
        assert operation_security(None, True) == []
        assert operation_security(ResourceMeta(), False) is None
        assert operation_security(ResourceMeta(security=[]), False) == []
        assert operation_security(ResourceMeta(security=[{"myBasic": []}]), False) == []


class TestPathLayout:
    def test_user_paths(self):
        assert list(_paths("User")) == [
            "/user",
            "/user/{id}",
            "/user/{id}/posts",
            "/user/{id}/relationships/posts",
            "/user/{id}/profile",
            "/user/{id}/relationships/profile",
            "/user/{id}/likes",
            "/user/{id}/relationships/likes",
        ]

    def test_methods(self):
        paths = _paths("User")
        assert list(paths["/user"]) == ["get", "post"]
        assert list(paths["/user/{id}"]) == ["get", "put", "patch", "delete"]
        assert list(paths["/user/{id}/likes"]) == ["get"]
        assert set(paths["/user/{id}/relationships/likes"]) == {"get", "post", "put", "patch"}

    def test_to_one_relationship_has_no_post(self):
        paths = _paths("post_Item")
        assert set(paths["/post_Item/{id}/relationships/author"]) == {"get", "put", "patch"}

    def test_prefix_and_name_mapping(self):
        paths = _paths("User", prefix="/api", name_mapping={"User": "Member"})
        assert "/api/member" in paths
        assert "/api/member/{id}/relationships/posts" in paths
        assert paths["/api/member"]["get"]["operationId"] == "list-User"
        assert paths["/api/member/{id}"]["put"]["operationId"] == "update-Member-put"
        assert paths["/api/member/{id}"]["patch"]["operationId"] == "update-Member-patch"
        assert paths["/api/member/{id}"]["delete"]["operationId"] == "delete-User"

    def test_excluded_related_entity_is_skipped(self):
        builder = _builder()
        del builder.included["Profile"]
        paths = builder.build(builder.graph.entity("User"))
        assert "/user/{id}/profile" not in paths
        assert "/user/{id}/relationships/profile" not in paths
        assert "/user/{id}/posts" in paths


class TestOperations:
    def test_operation_ids(self):
        paths = _paths("User")
        ids = [op["operationId"] for item in paths.values() for op in item.values()]
        assert "list-User" in ids
        assert "update-User-put" in ids
        assert "update-User-patch" in ids
        assert "fetch-User-related-posts" in ids
        assert "fetch-User-relationship-likes" in ids
        assert "create-User-relationship-likes" in ids
        assert "update-User-relationship-profile-patch" in ids
        assert len(ids) == len(set(ids))

    def test_list_operation(self):
        op = _paths("User")["/user"]["get"]
        assert op["tags"] == ["user"]
        assert op["parameters"][:4] == [
            {"$ref": "#/components/parameters/include"},
            {"$ref": "#/components/parameters/sort"},
            {"$ref": "#/components/parameters/page-offset"},
            {"$ref": "#/components/parameters/page-limit"},
        ]
        assert len(op["parameters"]) == 4 + 21
        assert op["responses"]["200"]["content"]["application/vnd.api+json"]["schema"] == {
            "$ref": "#/components/schemas/UserListResponse"
        }
        assert "security" not in op

    def test_create_operation_responses(self):
        op = _paths("User")["/user"]["post"]
        assert set(op["responses"]) == {"201", "403", "422"}
        assert op["requestBody"]["content"]["application/vnd.api+json"]["schema"] == {
            "$ref": "#/components/schemas/UserCreateRequest"
        }

    def test_delete_success_has_no_content(self):
        op = _paths("User")["/user/{id}"]["delete"]
        assert op["responses"]["200"] == {"description": "Successful operation"}

    def test_related_collection_uses_related_filters(self):
        op = _paths("User")["/user/{id}/posts"]["get"]
        names = [p.get("name") for p in op["parameters"]]
        assert "filter[title]" in names
        assert "filter[email]" not in names
        assert op["responses"]["200"]["content"]["application/vnd.api+json"]["schema"] == {
            "$ref": "#/components/schemas/post_ItemListResponse"
        }

    def test_related_to_one_has_no_collection_parameters(self):
        op = _paths("User")["/user/{id}/profile"]["get"]
        assert op["parameters"] == [
            {"$ref": "#/components/parameters/id"},
            {"$ref": "#/components/parameters/include"},
        ]

    def test_relationship_update_descriptions(self):
        paths = _paths("User")
        assert paths["/user/{id}/relationships/posts"]["put"]["description"] == (
            'Update "posts" relationships for a "User"'
        )
        assert paths["/user/{id}/relationships/profile"]["put"]["description"] == (
            'Update "profile" relationship for a "User"'
        )
        assert paths["/user/{id}/relationships/profile"]["patch"]["requestBody"]["content"][
            "application/vnd.api+json"
        ]["schema"] == {"$ref": "#/components/schemas/_toOneRelationshipRequest"}


class TestSecurity:
    def test_open_policy_clears_security(self):
        analyze = MagicMock(return_value=PolicyResult(read=True))
        paths = _paths("post_Item", analyze=analyze)
        assert paths["/post_Item"]["get"]["security"] == []
        assert paths["/post_Item/{id}"]["get"]["security"] == []
        assert "security" not in paths["/post_Item"]["post"]
        assert "security" not in paths["/post_Item/{id}/relationships/likes"]["post"]

    def test_related_fetch_uses_related_read_policy(self):
        def analyze(entity):
            return PolicyResult(read=entity.name == "post_Item")

        paths = _paths("User", analyze=analyze)
        assert paths["/user/{id}/posts"]["get"]["security"] == []
        assert "security" not in paths["/user/{id}/relationships/posts"]["get"]
        assert "security" not in paths["/user/{id}/profile"]["get"]

    def test_meta_override_opens_everything(self):
        builder = _builder()
        user = builder.graph.entity("User").model_copy(update={"meta": ResourceMeta(security=[])})
        paths = builder.build(user)
        for item in paths.values():
            for op in item.values():
                assert op["security"] == []
