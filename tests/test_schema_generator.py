from typing import Annotated, Any, Dict, List, Literal, Optional

from toolbridge import Description, FromBody, ParameterSource, SchemaGenerator
from toolbridge.core.metadata import RawOperation, RawParameter
from toolbridge.core.schema import collect_properties, route_parameter_names
from toolbridge.sources import ControllerToolSource
from tests.fixtures.controllers import (
    CalcController,
    Color,
    CreateOrder,
    Customer,
    Mode,
    OrdersController,
    Priority,
    Product,
    TreeNode,
)


def _definitions():
    generator = SchemaGenerator()
    operations = ControllerToolSource([CalcController, OrdersController]).discover()
    return {op.name: generator.generate(op) for op in operations}


def test_primitive_parameters_are_query_and_required():
    schema = _definitions()["Calc_Add"].input_schema()

    assert schema == {
        "type": "object",
        "properties": {
            "a": {"type": "integer", "description": "第一個數", "x-source": "query"},
            "b": {"type": "integer", "description": "第二個數", "x-source": "query"},
        },
        "required": ["a", "b"],
    }


def test_route_parameter_is_required_and_default_is_kept():
    definition = _definitions()["Calc_divide"]
    numerator = definition.parameter("numerator")
    denominator = definition.parameter("denominator")

    assert numerator.source is ParameterSource.ROUTE
    assert numerator.required is True
    assert numerator.description == "Parameter numerator of type float"
    assert denominator.source is ParameterSource.QUERY
    assert denominator.required is False
    assert definition.input_schema()["properties"]["denominator"]["default"] == 1.0
    assert definition.input_schema()["required"] == ["numerator"]


def test_complex_parameter_expands_nested_object():
    schema = _definitions()["Orders_create"].input_schema()
    request = schema["properties"]["request"]

    assert request["type"] == "object"
    assert request["x-source"] == "body"
    assert list(request["properties"]) == ["name", "quantity", "address", "tags", "priority"]
    assert request["required"] == ["name"]
    assert request["properties"]["quantity"]["default"] == 1
    assert request["properties"]["tags"] == {
        "type": "array",
        "description": "Property tags of type List[str]",
        "items": {"type": "string"},
    }
    assert request["properties"]["priority"]["enum"] == [1, 2, 3]
    assert request["properties"]["priority"]["type"] == "integer"

    address = request["properties"]["address"]
    assert address["type"] == "object"
    assert address["required"] == ["street", "city"]
    assert "zip_code" in address["properties"]

    assert schema["properties"]["trace_id"]["x-source"] == "header"
    assert schema["required"] == ["request"]


def test_self_reference_stops_at_leaf():
    generator = SchemaGenerator()
    info = generator.type_info(TreeNode)

    children = info.properties["children"]
    assert children.type == "array"
    assert children.items.circular is True
    assert children.items.properties is None
    assert children.items.to_schema() == {
        "type": "object",
        "description": "Circular reference to TreeNode",
    }

    parent = info.properties["parent"]
    assert parent.circular is True
    assert parent.nullable is True
    assert "properties" not in parent.to_schema()


def test_inherited_properties_are_base_first_with_derived_metadata():
    properties = [prop.name for prop in collect_properties(Customer)]
    assert properties == ["id", "created_by", "name", "email"]

    info = SchemaGenerator().type_info(Customer)
    assert info.required_properties == ["id", "name"]
    assert info.properties["created_by"].description == "建立者帳號"
    assert info.properties["name"].description == "顧客名稱"
    assert info.properties["email"].nullable is True


def test_pydantic_model_fields():
    info = SchemaGenerator().type_info(Product)
    schema = info.to_schema()

    assert list(schema["properties"]) == ["sku", "price", "stock"]
    assert schema["required"] == ["sku", "price"]
    assert schema["properties"]["price"]["description"] == "單價"
    assert schema["properties"]["stock"]["default"] == 0


def test_enum_rendering():
    generator = SchemaGenerator()

    assert generator.type_info(Priority).to_schema() == {"type": "integer", "enum": [1, 2, 3]}
    assert generator.type_info(Color).to_schema() == {"type": "string", "enum": ["red", "green", "blue"]}
    assert generator.type_info(Mode).to_schema() == {"type": "string", "enum": ["FAST", "SAFE"]}
    assert generator.type_info(Literal["a", "b"]).to_schema() == {"type": "string", "enum": ["a", "b"]}


def test_collections_and_mappings():
    generator = SchemaGenerator()

    assert generator.type_info(List[int]).to_schema() == {"type": "array", "items": {"type": "integer"}}
    assert generator.type_info(Dict[str, float]).to_schema() == {
        "type": "object",
        "properties": {},
        "additionalProperties": {"type": "number"},
    }
    nested = generator.type_info(List[CreateOrder]).to_schema()
    assert nested["items"]["type"] == "object"
    assert nested["items"]["required"] == ["name"]


def test_optional_and_annotated_description():
    generator = SchemaGenerator()
    info = generator.type_info(Annotated[Optional[int], Description("頁碼")])

    assert info.nullable is True
    assert info.to_schema() == {"type": "integer", "description": "頁碼"}


def test_source_inference_priority():
    generator = SchemaGenerator()
    route_names = route_parameter_names("api/{Id:int}/files/{*path}")

    assert route_names == frozenset({"id", "path"})
    assert generator.infer_source(RawParameter("id", int), route_names=route_names) is ParameterSource.ROUTE
    assert generator.infer_source(RawParameter("ids", List[int])) is ParameterSource.QUERY
    assert generator.infer_source(RawParameter("color", Color)) is ParameterSource.QUERY
    assert generator.infer_source(RawParameter("order", CreateOrder)) is ParameterSource.BODY
    assert generator.infer_source(RawParameter("orders", List[CreateOrder])) is ParameterSource.BODY
    assert (
        generator.infer_source(RawParameter("count", Annotated[int, FromBody()]))
        is ParameterSource.BODY
    )
    assert (
        generator.infer_source(
            RawParameter("id", int, source_hint=ParameterSource.HEADER), route_names=route_names
        )
        is ParameterSource.HEADER
    )


def test_type_info_is_cached_per_expansion_path():
    generator = SchemaGenerator()

    assert generator.type_info(CreateOrder) is generator.type_info(CreateOrder)
    assert generator.type_info(TreeNode) is not generator.type_info(TreeNode, frozenset({TreeNode}))


def test_untyped_parameter_is_any():
    generator = SchemaGenerator()
    operation = RawOperation(
        name="echo",
        method=lambda value: value,
        parameters=(RawParameter("value", Any),),
    )
    definition = generator.generate(operation)

    info = definition.parameter("value")
    assert info.type == "string"
    assert info.nullable is True
    assert info.source is ParameterSource.QUERY


def test_mutual_reference_stops_at_leaf():
    from tests.fixtures.intake import Employee

    info = SchemaGenerator().type_info(Employee)

    department = info.properties["department"]
    assert department.circular is False
    assert list(department.properties) == ["name", "manager"]

    manager = department.properties["manager"]
    assert manager.circular is True
    assert manager.properties is None
    assert manager.nullable is True
    schema = manager.to_schema()
    assert "properties" not in schema
    assert schema["type"] == "object"
    assert schema["description"] == "Circular reference to Employee"
