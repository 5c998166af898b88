"""Shared fixtures: a small web-shop schema spread over three scopes."""

import pytest

from schema2dto.core.config import GeneratorConfig
from schema2dto.core.constraints import NotBlank, Pattern, Range
from schema2dto.core.generator import generate_code
from schema2dto.core.schema import (
    ArrayType,
    EnumType,
    Field,
    NamespaceScope,
    ObjectType,
    Primitive,
    PrimitiveKind,
    Reference,
    SchemaGraph,
)

STRING = Primitive(PrimitiveKind.STRING)

CUSTOMER = NamespaceScope("customer", "v1", "Customer profile module")
ORDERS = NamespaceScope("order", "v1", "Order module")
CATALOG = NamespaceScope("catalog", "v1")


class Shop:
    """Type ids of the web-shop graph."""

    CUSTOMER_USER_TYPE = "customer.yaml#/components/schemas/UserTypeV1"
    USER = "customer.yaml#/components/schemas/UserV1"
    ORDER_USER_TYPE = "order.yaml#/components/schemas/UserTypeV1"
    ORDER_STATUS = "order.yaml#/components/schemas/OrderStatusV1"
    ORDER = "order.yaml#/components/schemas/OrderV1"
    CATEGORY = "catalog.yaml#/components/schemas/ProductCategoryV1"
    PRODUCT = "catalog.yaml#/components/schemas/ProductV1"

    ALL = (CUSTOMER_USER_TYPE, USER, ORDER_USER_TYPE, ORDER_STATUS, ORDER, CATEGORY, PRODUCT)


def build_shop_graph() -> SchemaGraph:
    types = {
        Shop.CUSTOMER_USER_TYPE: EnumType("UserTypeV1", ("Private", "Business"), description="Type of user"),
        Shop.USER: ObjectType(
            "UserV1",
            fields=(
                Field("id", Primitive(PrimitiveKind.STRING, "uuid"), required=True),
                Field("name", STRING, required=True, description="Display name", constraints=(NotBlank(),)),
                Field(
                    "phone",
                    STRING,
                    required=True,
                    constraints=(NotBlank(), Pattern("^[0-9]{10,15}$")),
                ),
                Field("email", Primitive(PrimitiveKind.STRING, "email")),
                Field("type", Reference(Shop.CUSTOMER_USER_TYPE), required=True),
            ),
            description="A registered customer",
        ),
        Shop.ORDER_USER_TYPE: EnumType("UserTypeV1", ("Guest", "Registered"), description="User type"),
        Shop.ORDER_STATUS: EnumType(
            "OrderStatusV1", ("Created", "Processing", "Dispatched"), description="Status of an order"
        ),
        Shop.ORDER: ObjectType(
            "OrderV1",
            fields=(
                Field("id", Primitive(PrimitiveKind.INTEGER, "int64"), required=True),
                Field("customer", Reference(Shop.USER), required=True),
                Field("userType", Reference(Shop.ORDER_USER_TYPE)),
                Field("status", Reference(Shop.ORDER_STATUS), default="Created"),
                Field("items", ArrayType(Reference(Shop.PRODUCT), min_items=1), required=True),
                Field("total", Primitive(PrimitiveKind.NUMBER), required=True, constraints=(Range(min=0),)),
                Field("placedAt", Primitive(PrimitiveKind.STRING, "date-time"), required=True, nullable=True),
                Field("notes", STRING, deprecated=True, deprecation_message="Use comments"),
            ),
        ),
        Shop.CATEGORY: ObjectType(
            "ProductCategoryV1",
            fields=(
                Field("name", STRING, required=True),
                Field("parent", Reference(Shop.CATEGORY)),
            ),
        ),
        Shop.PRODUCT: ObjectType(
            "ProductV1",
            fields=(
                Field("sku", STRING, required=True),
                Field("price", Primitive(PrimitiveKind.NUMBER, "double"), required=True),
                Field("category", Reference(Shop.CATEGORY), required=True),
                Field("tags", ArrayType(STRING, unique_items=True)),
            ),
        ),
    }
    scopes = {
        Shop.CUSTOMER_USER_TYPE: CUSTOMER,
        Shop.USER: CUSTOMER,
        Shop.ORDER_USER_TYPE: ORDERS,
        Shop.ORDER_STATUS: ORDERS,
        Shop.ORDER: ORDERS,
        Shop.CATEGORY: CATALOG,
        Shop.PRODUCT: CATALOG,
    }
    return SchemaGraph(types, scopes)


@pytest.fixture
def shop():
    return Shop


@pytest.fixture
def shop_graph():
    return build_shop_graph()


@pytest.fixture
def generate(shop_graph):
    """Run the pipeline for one language and return the result."""

    def run(language, graph=None, **overrides):
        config = GeneratorConfig(languages=(language,), max_workers=1, **overrides)
        return generate_code(graph or shop_graph, config)

    return run
