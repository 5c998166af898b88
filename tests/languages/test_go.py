from schema2dto.core.constraints import Custom, NotBlank
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
from schema2dto.languages.go.generator import align
from schema2dto.languages.go.types import GoImports, GoType, go_string, package_alias

STRING = Primitive(PrimitiveKind.STRING)
INT32 = Primitive(PrimitiveKind.INTEGER, "int32")


def render(generate, type_id, graph=None, **overrides):
    result = generate("go", graph, **overrides)
    assert [failure.type_id for failure in result.failures if failure.type_id == type_id] == []
    return result.get(type_id, "go").text


def tags_of(text, field_name):
    """Field line with gofmt padding collapsed."""
    for line in text.splitlines():
        words = line.split()
        if words and words[0] == field_name:
            return " ".join(words[1:])
    raise AssertionError(f"no field {field_name}")


def test_enum(generate, shop):
    text = render(generate, shop.ORDER_STATUS)

    assert text == (
        "// Code generated by schema2dto. DO NOT EDIT.\n"
        "\n"
        "package v1\n"
        "\n"
        "// OrderStatusV1Dto Status of an order\n"
        "type OrderStatusV1Dto string\n"
        "\n"
        "const (\n"
        '\tOrderStatusV1DtoCreated    OrderStatusV1Dto = "Created"\n'
        '\tOrderStatusV1DtoProcessing OrderStatusV1Dto = "Processing"\n'
        '\tOrderStatusV1DtoDispatched OrderStatusV1Dto = "Dispatched"\n'
        ")\n"
    )


def test_struct_is_gofmt_aligned(generate):
    graph = SchemaGraph({"t": ObjectType("Point", fields=(Field("x", INT32, required=True), Field("label", STRING)))})

    text = render(generate, "t", graph)

    assert text == (
        "// Code generated by schema2dto. DO NOT EDIT.\n"
        "\n"
        "package model\n"
        "\n"
        "type PointDto struct {\n"
        '\tX     int32   `json:"x"`\n'
        '\tLabel *string `json:"label,omitempty"`\n'
        "}\n"
    )


def test_struct_fields_and_imports(generate, shop):
    text = render(generate, shop.ORDER)

    assert (
        "import (\n"
        '\t"time"\n'
        "\n"
        '\tcatalogv1 "generated/model/catalog/v1"\n'
        '\tcustomerv1 "generated/model/customer/v1"\n'
        ")\n"
    ) in text
    assert tags_of(text, "Id") == 'int64 `json:"id"`'
    assert tags_of(text, "Customer") == 'customerv1.UserV1Dto `json:"customer" validate:"required"`'
    assert tags_of(text, "UserType") == '*UserTypeV1Dto `json:"userType,omitempty"`'
    assert tags_of(text, "Status") == 'OrderStatusV1Dto `json:"status" validate:"required"`'
    assert tags_of(text, "Items") == '[]catalogv1.ProductV1Dto `json:"items" validate:"required,min=1,dive"`'
    assert tags_of(text, "Total") == 'float64 `json:"total" validate:"gte=0"`'
    assert tags_of(text, "PlacedAt") == '*time.Time `json:"placedAt,omitempty"`'
    assert "\t// Deprecated: Use comments\n\tNotes *string `json:\"notes,omitempty\"`\n}" in text


def test_go_module_prefixes_import_paths(generate, shop):
    text = render(generate, shop.ORDER, custom={"go_module": "example.com/shop/"})

    assert '\tcatalogv1 "example.com/shop/generated/model/catalog/v1"\n' in text


def test_validate_rules(generate):
    graph = SchemaGraph(
        {
            "t": ObjectType(
                "Account",
                fields=(
                    Field("id", Primitive(PrimitiveKind.STRING, "uuid"), required=True),
                    Field("email", Primitive(PrimitiveKind.STRING, "email")),
                    Field("name", STRING, required=True, constraints=(NotBlank(),)),
                    Field("nickname", STRING, constraints=(NotBlank(),)),
                    Field("born", Primitive(PrimitiveKind.STRING, "date"), required=True),
                    Field("tags", ArrayType(STRING, unique_items=True)),
                    Field("sku", STRING, constraints=(Custom("Sku", {"go": "sku"}),)),
                    Field("active", Primitive(PrimitiveKind.BOOLEAN), required=True),
                    Field("avatar", Primitive(PrimitiveKind.STRING, "binary")),
                ),
            )
        }
    )

    text = render(generate, "t", graph)

    assert tags_of(text, "Id") == 'string `json:"id" validate:"required,uuid"`'
    assert tags_of(text, "Email") == '*string `json:"email,omitempty" validate:"omitempty,email"`'
    assert tags_of(text, "Name") == 'string `json:"name" validate:"required"`'
    assert tags_of(text, "Nickname") == '*string `json:"nickname,omitempty" validate:"omitempty,min=1"`'
    assert tags_of(text, "Born") == 'string `json:"born" validate:"required,datetime=2006-01-02"`'
    assert tags_of(text, "Tags") == '[]string `json:"tags,omitempty" validate:"omitempty,unique"`'
    assert tags_of(text, "Sku") == '*string `json:"sku,omitempty" validate:"omitempty,sku"`'
    assert tags_of(text, "Active") == 'bool `json:"active"`'
    assert tags_of(text, "Avatar") == '[]byte `json:"avatar,omitempty"`'


def test_without_validation(generate, shop):
    text = render(generate, shop.ORDER, add_validation=False)

    assert "validate:" not in text


def test_custom_rule_is_required(generate):
    graph = SchemaGraph({"t": ObjectType("T", fields=(Field("sku", STRING, constraints=(Custom("Sku"),)),))})

    result = generate("go", graph)

    assert "no go validator rule" in result.failures[0].detail


def test_pattern_fails_the_unit(generate, shop):
    result = generate("go")

    assert "has a pattern" in result.failures[0].detail
    assert str(result.failures[0]).startswith(f"[go] {shop.USER}: ")


def test_comments(generate):
    graph = SchemaGraph(
        {
            "t": ObjectType(
                "Query",
                fields=(
                    Field("limit", INT32, required=True, nullable=True, default=5, description="Page size"),
                    Field("offset", INT32, default=0),
                ),
                description="Search query",
                deprecated=True,
                deprecation_message="Use Search",
            )
        }
    )

    text = render(generate, "t", graph)

    assert "// QueryDto Search query\n//\n// Deprecated: Use Search\ntype QueryDto struct {\n" in text
    assert "\t// Page size\n\t// Default: 5\n\tLimit  *int32" in text
    assert "Default: 0" not in text


def test_empty_struct(generate):
    graph = SchemaGraph({"t": ObjectType("Marker")})

    assert render(generate, "t", graph).endswith("\ntype MarkerDto struct{}\n")


def test_package_cycle_fails_both_structs(generate):
    graph = SchemaGraph(
        {
            "a": ObjectType("Left", fields=(Field("right", Reference("b")),)),
            "b": ObjectType("Right", fields=(Field("left", Reference("a")),)),
            "c": EnumType("Side", ("l", "r")),
        },
        {"a": NamespaceScope("left"), "b": NamespaceScope("right"), "c": NamespaceScope("left")},
    )

    result = generate("go", graph)

    assert sorted(failure.type_id for failure in result.failures) == ["a", "b"]
    failure = next(failure for failure in result.failures if failure.type_id == "a")
    assert failure.detail == (
        "package import cycle: generated/model/left -> generated/model/right -> generated/model/left"
    )
    assert result.get("c", "go") is not None


def test_imports_alias_clashing_packages():
    imports = GoImports("example.com/m/", ("generated", "model", "x"), 2)

    assert imports.qualify(("generated", "model", "x"), "Own") == "Own"
    assert imports.qualify(("generated", "model", "a_b"), "T") == "ab.T"
    assert imports.qualify(("generated", "model", "ab"), "U") == "ab2.U"
    assert imports.qualify(("generated", "model", "a_b"), "V") == "ab.V"

    imports.use_standard("time")
    assert imports.groups() == [
        ['"time"'],
        ['ab "example.com/m/generated/model/a_b"', 'ab2 "example.com/m/generated/model/ab"'],
    ]


def test_package_alias():
    assert package_alias(("generated", "model", "order", "v1"), 2) == "orderv1"
    assert package_alias(("generated", "model"), 2) == "model"
    assert package_alias((), 0) == "model"


def test_go_type_pointer():
    go_type = GoType("time.Time", imports_needed=frozenset({"time"}))
    pointer = go_type.as_pointer()

    assert pointer.name == "*time.Time"
    assert pointer.base_name == "time.Time"
    assert pointer.imports_needed == frozenset({"time"})
    assert pointer.as_pointer() is pointer


def test_go_string():
    assert go_string('a "b"\n') == '"a \\"b\\"\\n"'


def test_align():
    assert align([("A", "int", "`x`"), ("Long", "string", "`y`")]) == ["A    int    `x`", "Long string `y`"]
    assert align([]) == []
