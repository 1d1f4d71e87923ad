"""Transport for the pricing, execution and trigger-order RPC service."""

from scopetrade.services.rpc.client import AUTH_REQUIRED_CODE, RpcClient, get_rpc_client
from scopetrade.services.rpc.protocol import RpcCaller

__all__ = ["AUTH_REQUIRED_CODE", "RpcCaller", "RpcClient", "get_rpc_client"]
