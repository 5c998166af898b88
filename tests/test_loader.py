import json
from decimal import Decimal

import pytest
import requests
import yaml

from schema2dto.core.config import GeneratorConfig
from schema2dto.core.constraints import Custom, Pattern, Range, Size
from schema2dto.core.errors import DuplicateDefinitionError
from schema2dto.core.generator import generate_code
from schema2dto.core.schema import (
    ArrayType,
    EnumType,
    MapType,
    NamespaceScope,
    ObjectType,
    Primitive,
    PrimitiveKind,
    Reference,
    SchemaGraph,
)
from schema2dto.loader import (
    LoaderError,
    build_schema_graph,
    is_url,
    load_document,
    load_document_from_url,
    load_schema_graph,
    merge_graphs,
)

ORDERS = {
    "openapi": "3.0.3",
    "info": {"title": "Orders", "version": "v1"},
    "x-model-subdir": "order",
    "components": {
        "schemas": {
            "Order": {
                "type": "object",
                "description": "An order",
                "required": ["id", "status"],
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "status": {"type": "string", "enum": ["Created", "Done"]},
                    "note": {"type": "string", "nullable": True, "deprecated": True,
                             "x-deprecation-message": "Use comments"},
                    "tags": {"type": "array", "items": {"type": "string"}, "uniqueItems": True, "minItems": 1},
                    "address": {"type": "object", "properties": {"city": {"type": "string"}}},
                    "attrs": {"type": "object", "additionalProperties": {"type": "integer"}},
                    "code": {"type": "string", "pattern": "^[A-Z]+$", "minLength": 2, "maxLength": 5},
                    "price": {"type": "number", "minimum": 0.5, "maximum": 10},
                    "sku": {"type": "string", "x-validation-constraint": "ValidSku",
                            "x-validation-params": {"python": "shop.checks.sku"}},
                    "priority": {"type": "integer", "default": 3},
                },
            },
            "Tag": {"type": "string", "x-api-version": "v2", "x-model-subdir": "catalog"},
        }
    },
}


def order_id(pointer=""):
    return f"orders.yaml#/components/schemas/Order{pointer}"


@pytest.fixture
def orders_graph():
    return build_schema_graph(ORDERS, "orders.yaml")


def test_definitions_and_hoisted_types_keep_document_order(orders_graph):
    assert list(orders_graph) == [
        order_id(),
        order_id("/properties/status"),
        order_id("/properties/address"),
        "orders.yaml#/components/schemas/Tag",
    ]
    assert orders_graph.types[order_id("/properties/status")] == EnumType("OrderStatus", ("Created", "Done"))
    assert orders_graph.types[order_id("/properties/address")].name == "OrderAddress"


def test_fields(orders_graph):
    order = orders_graph.types[order_id()]

    assert isinstance(order, ObjectType)
    assert order.description == "An order"
    assert [item.name for item in order.fields] == [
        "id", "status", "note", "tags", "address", "attrs", "code", "price", "sku", "priority",
    ]
    assert order.get_field("id").type == Primitive(PrimitiveKind.INTEGER, "int64")
    assert order.get_field("id").required
    assert order.get_field("status").type == Reference(order_id("/properties/status"))
    assert order.get_field("note").nullable
    assert order.get_field("note").deprecation_message == "Use comments"
    assert order.get_field("tags").type == ArrayType(Primitive(PrimitiveKind.STRING), 1, None, True)
    assert order.get_field("attrs").type == MapType(Primitive(PrimitiveKind.INTEGER))
    assert order.get_field("priority").default == 3


def test_constraints(orders_graph):
    order = orders_graph.types[order_id()]

    assert order.get_field("code").constraints == (Pattern("^[A-Z]+$"), Size(2, 5))
    assert order.get_field("price").constraints == (Range(Decimal("0.5"), 10),)
    assert order.get_field("sku").constraints == (Custom("ValidSku", {"python": "shop.checks.sku"}),)


def test_scopes(orders_graph):
    assert orders_graph.scope_of(order_id()) == NamespaceScope("order", "v1")
    assert orders_graph.scope_of(order_id("/properties/address")) == NamespaceScope("order", "v1")
    assert orders_graph.scope_of("orders.yaml#/components/schemas/Tag") == NamespaceScope("catalog", "v2")


@pytest.mark.parametrize(
    "schema",
    [
        {"type": ["string", "null"]},
        {"oneOf": [{"type": "string"}, {"type": "null"}]},
        {"type": "string", "x-nullable": True},
        {"type": "string", "nullable": True},
    ],
)
def test_nullable_markers(schema):
    document = {"definitions": {"T": {"properties": {"value": schema}}}}

    value = build_schema_graph(document).types["#/definitions/T"].fields[0]

    assert value.nullable
    assert value.type == Primitive(PrimitiveKind.STRING)


@pytest.mark.parametrize(
    "schema, message",
    [
        ({"anyOf": [{"type": "string"}, {"type": "integer"}]}, "'anyOf' is not supported"),
        ({"type": ["string", "integer"]}, "Union type"),
        ({"type": "tuple"}, "Unsupported schema type"),
        ({"oneOf": [{"type": "null"}]}, "non-null branch"),
    ],
)
def test_unsupported_constructs(schema, message):
    document = {"definitions": {"T": {"properties": {"value": schema}}}}

    with pytest.raises(LoaderError, match=message):
        build_schema_graph(document, "doc.yaml")


def test_composition_and_aliases():
    document = {
        "$defs": {
            "Base": {"properties": {"id": {"type": "string"}}},
            "Derived": {
                "allOf": [
                    {"$ref": "#/$defs/Base"},
                    {"properties": {"extra": {"type": "boolean"}}},
                ]
            },
            "Ids": {"type": "array", "items": {"$ref": "#/$defs/Base"}},
        }
    }

    graph = build_schema_graph(document, "doc.json")
    derived = graph.types["doc.json#/$defs/Derived"]

    assert derived.all_of[0] == Reference("doc.json#/$defs/Base")
    assert [item.name for item in derived.all_of[1].fields] == ["extra"]
    assert graph.types["doc.json#/$defs/Ids"] == ArrayType(Reference("doc.json#/$defs/Base"))


def test_standalone_json_schema():
    document = {"title": "user profile", "properties": {"name": {"type": "string"}}}

    graph = build_schema_graph(document, "schemas/user.json")

    assert list(graph) == ["schemas/user.json#"]
    assert graph.types["schemas/user.json#"].name == "UserProfile"


def test_enum_drops_null_variant():
    document = {"definitions": {"Color": {"enum": ["red", None, "blue"]}}}

    assert build_schema_graph(document).types["#/definitions/Color"].variants == ("red", "blue")


def test_load_file_and_external_references(tmp_path):
    (tmp_path / "customer.yaml").write_text(
        yaml.safe_dump({"components": {"schemas": {"User": {"properties": {"name": {"type": "string"}}}}}})
    )
    (tmp_path / "orders.json").write_text(
        json.dumps(
            {
                "components": {
                    "schemas": {
                        "Order": {"properties": {"customer": {"$ref": "customer.yaml#/components/schemas/User"}}}
                    }
                }
            }
        )
    )

    graph = load_schema_graph(tmp_path / "orders.json")

    user_id = f"{(tmp_path / 'customer.yaml').as_posix()}#/components/schemas/User"
    assert list(graph)[1] == user_id
    order = graph.types[f"{(tmp_path / 'orders.json').as_posix()}#/components/schemas/Order"]
    assert order.fields[0].type == Reference(user_id)

    result = generate_code(graph, GeneratorConfig(languages=("java", "go"), max_workers=1))
    assert result.failures == []
    assert len(result.units) == 4


def test_loaded_document_generates_code(orders_graph):
    result = generate_code(orders_graph, GeneratorConfig(languages=("python",), max_workers=1))

    assert result.failures == []
    assert [unit.type_name for unit in result.units] == ["OrderDto", "OrderStatusDto", "OrderAddressDto"]


def test_merge_graphs():
    first = SchemaGraph({"a": EnumType("A", ("x",))})
    same = SchemaGraph({"a": EnumType("A", ("x",)), "b": EnumType("B", ("y",))})
    other = SchemaGraph({"a": EnumType("A", ("z",))})

    assert list(merge_graphs(first, same)) == ["a", "b"]
    with pytest.raises(DuplicateDefinitionError, match="defined differently"):
        merge_graphs(first, other)


def test_missing_file(tmp_path):
    with pytest.raises(LoaderError, match="File not found"):
        load_document(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "name, text, message",
    [
        ("bad.json", "{not json", "Invalid document"),
        ("bad.yaml", "a: [unclosed", "Invalid document"),
        ("list.yaml", "- one\n- two\n", "must be a mapping"),
    ],
)
def test_malformed_documents(tmp_path, name, text, message):
    path = tmp_path / name
    path.write_text(text)

    with pytest.raises(LoaderError, match=message):
        load_document(path)


def test_is_url():
    assert is_url("https://example.com/api.yaml")
    assert not is_url("ftp://example.com/api.yaml")
    assert not is_url("schemas/api.yaml")


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(response=self)


def test_load_from_url(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse("definitions:\n  Color:\n    enum: [red]\n")

    monkeypatch.setattr(requests, "get", fake_get)

    document = load_document("https://example.com/api.yaml", timeout=5)

    assert document == {"definitions": {"Color": {"enum": ["red"]}}}
    assert calls == [("https://example.com/api.yaml", 5)]


@pytest.mark.parametrize(
    "error, message",
    [
        (requests.exceptions.Timeout(), "Request timeout"),
        (requests.exceptions.ConnectionError("refused"), "Connection error"),
        (requests.exceptions.RequestException("boom"), "Request error"),
    ],
)
def test_url_errors(monkeypatch, error, message):
    def fake_get(url, timeout):
        raise error

    monkeypatch.setattr(requests, "get", fake_get)

    with pytest.raises(LoaderError, match=message):
        load_document_from_url("https://example.com/api.yaml")


def test_http_error(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: FakeResponse("", 404))

    with pytest.raises(LoaderError, match="HTTP error 404"):
        load_document_from_url("https://example.com/api.yaml")


def test_invalid_url():
    with pytest.raises(LoaderError, match="Invalid URL"):
        load_document_from_url("not a url")


def test_named_primitive_keeps_its_facets():
    document = {
        "components": {
            "schemas": {
                "Phone": {"type": "string", "pattern": "^[0-9]{10,15}$", "maxLength": 15},
                "UserV1": {
                    "type": "object",
                    "required": ["phone"],
                    "properties": {"phone": {"$ref": "#/components/schemas/Phone"}},
                },
            }
        }
    }

    graph = build_schema_graph(document, "users.yaml")

    assert graph.types["users.yaml#/components/schemas/Phone"] == Primitive(
        PrimitiveKind.STRING, constraints=(Pattern("^[0-9]{10,15}$"), Size(None, 15))
    )

    result = generate_code(graph, GeneratorConfig(languages=("java",), max_workers=1))
    text = result.get("users.yaml#/components/schemas/UserV1", "java").text

    assert '@Pattern(regexp = "^[0-9]{10,15}$")' in text
    assert "@Size(max = 15)" in text


def test_exclusive_bounds_are_skipped_with_a_warning(caplog):
    document = {"definitions": {"T": {"properties": {"n": {"type": "integer", "exclusiveMinimum": 0}}}}}

    with caplog.at_level("WARNING", logger="schema2dto"):
        graph = build_schema_graph(document, "doc.yaml")

    assert graph.types["doc.yaml#/definitions/T"].fields[0].constraints == ()
    assert "Skipping unsupported facet 'exclusiveMinimum' at doc.yaml#/definitions/T/properties/n" in caplog.text
