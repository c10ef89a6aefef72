from .annotations import Description, FromBody, FromForm, FromHeader, FromQuery, FromRoute, Required
from .binding import BindingError, BindingErrorKind, BindingResult, ParameterBinder
from .context import RequestContext
from .invoker import DefaultHandlerResolver, ToolInvoker
from .metadata import HandlerResolver, RawOperation, RawParameter, ToolDefinitionSource, read_parameters
from .models import NO_DEFAULT, ParameterInfo, ParameterSource, RegisteredTool, ToolDefinition
from .registry import ToolRegistry
from .result_serializer import ActionResult, ResultSerializer
from .schema import SchemaGenerator

__all__ = [
    "ActionResult",
    "BindingError",
    "BindingErrorKind",
    "BindingResult",
    "DefaultHandlerResolver",
    "Description",
    "FromBody",
    "FromForm",
    "FromHeader",
    "FromQuery",
    "FromRoute",
    "HandlerResolver",
    "NO_DEFAULT",
    "ParameterBinder",
    "ParameterInfo",
    "ParameterSource",
    "RawOperation",
    "RawParameter",
    "RegisteredTool",
    "RequestContext",
    "Required",
    "ResultSerializer",
    "SchemaGenerator",
    "ToolDefinition",
    "ToolDefinitionSource",
    "ToolInvoker",
    "ToolRegistry",
    "read_parameters",
]
