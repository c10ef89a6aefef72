from toolbridge import ControllerToolSource, ServerContext, ServerOptions
from tests.fixtures.controllers import CalcController, OrdersController
from tests.fixtures.function_tools import collection


def controller_context(*, legacy_method_calls: bool = False, resolver=None) -> ServerContext:
    source = ControllerToolSource([CalcController, OrdersController])
    options = ServerOptions(server_version="9.9.9", legacy_method_calls=legacy_method_calls)
    return ServerContext.from_source(source, options=options, resolver=resolver)


def function_context() -> ServerContext:
    return ServerContext.from_source(collection, options=ServerOptions(server_version="9.9.9"))
