__all__ = [
    # Errors
    "HarnessError",
    "ValidationError",
    "UnknownSelector",
    "SigningError",
    "UnknownAccount",
    "RPCTransportError",
    "RpcError",
    # Configuration
    "HarnessConfig",
    # Envelopes
    "AUTO",
    "AccessListEntry",
    "DecodedTransaction",
    "EnvelopeType",
    "InclusionResult",
    "Nonce",
    "SignedTransaction",
    "TransactionRequest",
    "decode_transaction",
    # Node client + builder
    "NodeRPCClient",
    "TransactionBuilder",
    "make_request",
    "wait_for_inclusion",
    # Keys
    "Keypair",
    "KeyStore",
    "StaticKeyStore",
    "EnvKeyStore",
    "ChainedKeyStore",
    "dev_keystore",
    "generate_keypair",
    # Precompiles
    "Precompile",
    "PRECOMPILES",
    "get_precompile",
    "SelectorTable",
    "function_selector",
    "PrecompileCodec",
    "encode_call",
    "view_call",
    "dispatch_call",
]

from .errors import (
    HarnessError,
    RpcError,
    RPCTransportError,
    SigningError,
    UnknownAccount,
    UnknownSelector,
    ValidationError,
)
from .config import HarnessConfig
from .pneuma.envelope import (
    AUTO,
    AccessListEntry,
    DecodedTransaction,
    EnvelopeType,
    InclusionResult,
    Nonce,
    SignedTransaction,
    TransactionRequest,
    decode_transaction,
)
from .pneuma.rpc import NodeRPCClient
from .pneuma.tx import TransactionBuilder, make_request, wait_for_inclusion
from .sigil.keystore import (
    ChainedKeyStore,
    EnvKeyStore,
    Keypair,
    KeyStore,
    StaticKeyStore,
    dev_keystore,
    generate_keypair,
)
from .precompiles.interfaces import PRECOMPILES, Precompile, get_precompile
from .precompiles.selectors import SelectorTable, function_selector
from .precompiles.codec import PrecompileCodec, dispatch_call, encode_call, view_call
