"""JSON-RPC 2.0 envelope shared by every transport."""

from fetchtime.protocol.models import ErrorCode, JsonRpcError, JsonRpcRequest, JsonRpcResponse

__all__ = ["ErrorCode", "JsonRpcError", "JsonRpcRequest", "JsonRpcResponse"]
