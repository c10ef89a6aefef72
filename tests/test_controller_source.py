import pytest

from toolbridge import ControllerToolOptions, ControllerToolSource, DiscoveryError, controller, http_get
from toolbridge.core.models import ParameterSource
from toolbridge.sources.controllers import combine_routes, controller_name
from tests.fixtures.controllers import CalcController, InternalController, OrdersController


def _by_name(source):
    return {op.name: op for op in source.discover()}


def test_actions_become_operations():
    operations = _by_name(ControllerToolSource([CalcController]))

    assert list(operations) == ["Calc_Add", "Calc_divide", "Calc_power", "Calc_version"]
    add = operations["Calc_Add"]
    assert add.http_method == "GET"
    assert add.route_template == "api/Calc/add"
    assert add.handler is CalcController
    assert add.is_static is False
    assert [p.name for p in add.parameters] == ["a", "b"]
    assert add.parameters[0].description == "第一個數"


def test_static_and_class_methods_are_static_operations():
    operations = _by_name(ControllerToolSource([CalcController]))

    power = operations["Calc_power"]
    assert power.is_static is True
    assert [p.name for p in power.parameters] == ["base", "exponent"]
    assert power.method(2, 3) == 8

    version = operations["Calc_version"]
    assert version.is_static is True
    assert version.parameters == ()
    assert version.method() == "1.0"


def test_header_marker_and_context_are_read_from_signature():
    operations = _by_name(ControllerToolSource([OrdersController]))

    create = operations["Orders_create"]
    assert [p.name for p in create.parameters] == ["request", "trace_id"]
    assert create.description == "建立訂單"
    assert create.route_template == "api/orders"
    assert operations["Orders_whoami"].parameters == ()
    assert operations["Orders_get"].route_template == "api/orders/{order_id}"


def test_tool_names_without_controller_prefix():
    options = ControllerToolOptions(include_controller_name_in_tool_name=False)
    operations = _by_name(ControllerToolSource([CalcController], options=options))

    assert list(operations) == ["Calc_Add", "divide", "power", "version"]


def test_excluded_controllers_match_case_insensitively():
    source = ControllerToolSource(
        [CalcController, InternalController],
        options=ControllerToolOptions(excluded_controllers=("internal", "CALCCONTROLLER")),
    )

    assert source.discover() == []


def test_module_scanning_finds_decorated_classes():
    operations = _by_name(ControllerToolSource(modules=["tests.fixtures.controllers"]))

    assert "Calc_Add" in operations
    assert "Orders_create" in operations
    assert "Internal_secret" in operations


def test_unknown_module_raises_discovery_error():
    source = ControllerToolSource(modules=["tests.fixtures.does_not_exist"])

    with pytest.raises(DiscoveryError):
        source.discover()


def test_controller_naming_and_routes():
    @controller(name="Billing")
    class InvoiceController:
        @http_get("[action]/{id}", description="列出發票")
        def list_all(self, id: int) -> list:
            return []

    class ArchivedOrdersController(OrdersController):
        pass

    assert controller_name(InvoiceController) == "Billing"
    assert controller_name(ArchivedOrdersController) == "ArchivedOrders"
    assert combine_routes("api/[controller]", "/absolute/path", InvoiceController, "x") == "absolute/path"

    operation = ControllerToolSource([InvoiceController]).discover()[0]
    assert operation.name == "Billing_list_all"
    assert operation.description == "列出發票"
    assert operation.route_template == "list_all/{id}"

    inherited = _by_name(ControllerToolSource([ArchivedOrdersController]))
    assert inherited["ArchivedOrders_get"].route_template == "api/orders/{order_id}"


def test_route_sources_follow_template():
    from toolbridge import SchemaGenerator

    operation = _by_name(ControllerToolSource([OrdersController]))["Orders_set_priority"]
    definition = SchemaGenerator().generate(operation)

    assert definition.parameter("order_id").source is ParameterSource.ROUTE
    assert definition.parameter("priority").source is ParameterSource.QUERY
