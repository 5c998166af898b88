from dataclasses import replace

import pytest

from schema2dto.core.errors import DuplicateDefinitionError
from schema2dto.core.naming import CasingPolicy, NameSanitizer, NamingCase, NamingStrategy, split_words
from schema2dto.core.resolver import resolve
from schema2dto.core.schema import EnumType, Field, NamespaceScope, ObjectType, Primitive, PrimitiveKind, SchemaGraph
from schema2dto.languages.go.naming import go_casing
from schema2dto.languages.java.naming import java_casing
from schema2dto.languages.python.naming import python_casing

STRING = Primitive(PrimitiveKind.STRING)


@pytest.mark.parametrize(
    "name, words",
    [
        ("userName", ["user", "Name"]),
        ("user_name", ["user", "name"]),
        ("HTTPServerURL", ["HTTP", "Server", "URL"]),
        ("UserV1", ["User", "V1"]),
        ("order-status", ["order", "status"]),
        ("", []),
    ],
)
def test_split_words(name, words):
    assert split_words(name) == words


@pytest.mark.parametrize(
    "name, case, expected",
    [
        ("placedAt", NamingCase.SNAKE_CASE, "placed_at"),
        ("placed_at", NamingCase.CAMEL_CASE, "placedAt"),
        ("placed_at", NamingCase.PASCAL_CASE, "PlacedAt"),
        ("placedAt", NamingCase.SCREAMING_SNAKE, "PLACED_AT"),
        ("placedAt", NamingCase.KEBAB_CASE, "placed-at"),
        ("in-progress", NamingCase.ORIGINAL, "in_progress"),
        ("1st", NamingCase.SNAKE_CASE, "_1st"),
        ("1st", NamingCase.PASCAL_CASE, "X1st"),
        ("---", NamingCase.SNAKE_CASE, "field"),
    ],
)
def test_sanitize_name(name, case, expected):
    assert NameSanitizer().sanitize_name(name, case) == expected


def test_reserved_words_get_a_suffix():
    sanitizer = NameSanitizer({"class"}, {"list"})

    assert sanitizer.sanitize_name("class", NamingCase.SNAKE_CASE) == "class_"
    assert sanitizer.sanitize_name("list", NamingCase.SNAKE_CASE) == "list_"
    assert sanitizer.sanitize_name("klass", NamingCase.SNAKE_CASE) == "klass"


def test_namespace_from_scope():
    strategy = NamingStrategy(CasingPolicy(root_namespace=("com", "shop")))

    assert strategy.namespace(NamespaceScope("order", "v1")) == ("com", "shop", "order", "v1")
    assert strategy.namespace(NamespaceScope("customer/profile", "2.1")) == (
        "com",
        "shop",
        "customer",
        "profile",
        "v2_1",
    )
    assert strategy.namespace(NamespaceScope()) == ("com", "shop")


def test_same_name_in_two_scopes_does_not_collide(shop_graph, shop):
    names = NamingStrategy(java_casing()).build_table(resolve(shop_graph))

    customer = names[shop.CUSTOMER_USER_TYPE]
    order = names[shop.ORDER_USER_TYPE]
    assert customer.type_name == order.type_name == "UserTypeV1Dto"
    assert customer.namespace == ("customer", "v1")
    assert order.namespace == ("order", "v1")
    assert customer.qualified_name == "customer.v1.UserTypeV1Dto"


def test_same_name_in_one_scope_collides():
    scope = NamespaceScope("shop")
    graph = SchemaGraph(
        {"a#User": ObjectType("User", fields=(Field("id", STRING),)), "b#User": EnumType("User", ("x",))},
        {"a#User": scope, "b#User": scope},
    )

    with pytest.raises(DuplicateDefinitionError) as exc_info:
        NamingStrategy(java_casing()).build_table(resolve(graph))
    assert exc_info.value.type_id == "b#User"


@pytest.mark.parametrize("order, failing", [(("e", "t"), "t"), (("t", "e"), "e")])
def test_qualified_variants_collide_with_type_names(order, failing):
    definitions = {
        "e": EnumType("Order", ("Status",)),
        "t": ObjectType("OrderStatus", fields=(Field("id", STRING),)),
    }
    graph = SchemaGraph({type_id: definitions[type_id] for type_id in order})
    tree = resolve(graph)

    with pytest.raises(DuplicateDefinitionError, match="is also used by") as exc_info:
        NamingStrategy(replace(go_casing(), type_suffix="")).build_table(tree)
    assert exc_info.value.type_id == failing

    java = NamingStrategy(replace(java_casing(), type_suffix="")).build_table(tree)
    assert java["e"].variant_name("Status") == "Status"


def test_file_names_colliding_by_case_are_rejected():
    graph = SchemaGraph(
        {
            "a": ObjectType("userinfo", fields=(Field("id", STRING),)),
            "b": ObjectType("UserInfo", fields=(Field("id", STRING),)),
        }
    )
    policy = CasingPolicy(type_case=NamingCase.ORIGINAL, type_suffix="")

    with pytest.raises(DuplicateDefinitionError, match="Output file"):
        NamingStrategy(policy).build_table(resolve(graph))


def test_field_names_colliding_after_conversion_are_rejected():
    graph = SchemaGraph(
        {"T": ObjectType("T", fields=(Field("user_name", STRING), Field("userName", STRING)))}
    )

    with pytest.raises(DuplicateDefinitionError, match="both map to 'user_name'"):
        NamingStrategy(python_casing()).build_table(resolve(graph))


def test_language_casing(shop_graph, shop):
    tree = resolve(shop_graph)

    java = NamingStrategy(java_casing()).build_table(tree)
    python = NamingStrategy(python_casing()).build_table(tree)
    go = NamingStrategy(go_casing()).build_table(tree)

    assert java[shop.ORDER].field_name("placedAt") == "placedAt"
    assert python[shop.ORDER].field_name("placedAt") == "placed_at"
    assert go[shop.ORDER].field_name("placedAt") == "PlacedAt"

    assert java[shop.ORDER_STATUS].variant_name("Created") == "Created"
    assert python[shop.ORDER_STATUS].variant_name("Created") == "CREATED"
    assert go[shop.ORDER_STATUS].variant_name("Created") == "OrderStatusV1DtoCreated"

    assert java[shop.ORDER].path(".java") == "order/v1/OrderV1Dto.java"
    assert python[shop.ORDER].path(".py") == "order/v1/order_v1_dto.py"
    assert python[shop.ORDER].module == "order.v1.order_v1_dto"


def test_reserved_field_names_per_language():
    graph = SchemaGraph(
        {"T": ObjectType("T", fields=(Field("class", STRING), Field("type", STRING), Field("list", STRING)))}
    )
    tree = resolve(graph)

    java = NamingStrategy(java_casing()).build_table(tree)["T"]
    python = NamingStrategy(python_casing()).build_table(tree)["T"]
    go = NamingStrategy(go_casing()).build_table(tree)["T"]

    assert [java.field_name(name) for name in ("class", "type", "list")] == ["class_", "type", "list"]
    assert [python.field_name(name) for name in ("class", "type", "list")] == ["class_", "type", "list_"]
    assert [go.field_name(name) for name in ("class", "type", "list")] == ["Class", "Type", "List"]


def test_type_suffix_and_root_namespace():
    policy = CasingPolicy(type_suffix="", root_namespace=("com", "shop"))
    graph = SchemaGraph({"T": EnumType("order_status", ("a",))}, {"T": NamespaceScope("order")})

    name = NamingStrategy(policy).build_table(resolve(graph))["T"]
    assert name.type_name == "OrderStatus"
    assert name.qualified_name == "com.shop.order.OrderStatus"
    assert name.path(".java") == "com/shop/order/OrderStatus.java"


def test_table_is_deterministic(shop_graph):
    tree = resolve(shop_graph)

    first = NamingStrategy(java_casing()).build_table(tree)
    second = NamingStrategy(java_casing()).build_table(tree)
    assert list(first) == list(second)
    assert [first[type_id] for type_id in first] == [second[type_id] for type_id in second]
