"""lnbolt3: keys, scripts and transactions for BOLT 3 payment channels.

Everything here is a pure function of its inputs: the caller supplies the
seed, the funding UTXO and the channel state, and gets back keys, scripts
and (unsigned or signed) python-bitcoinlib transactions.

"""
from .errors import (
    Bolt3Error,
    InvalidInputError,
    CryptoImpossibilityError,
    ProtocolViolationError,
)
from .utils import Side, MAX_COMMITMENT_NUMBER
from .chainparams import chainparams
from .config import ChannelConfig
from .derivation import (
    KeyFamily,
    ExtendedKey,
    KeysManager,
    FundingKeyProvider,
    DerivedFundingKeyProvider,
    StaticFundingKeyProvider,
    derive_basepoint_secret,
    derive_channel_key_material,
)
from .keyset import ChannelKeyMaterial, ChannelPublicKeys
from .shachain import (
    build_commitment_secret,
    derive_per_commitment_point,
    commitment_number_to_index,
    index_to_commitment_number,
    RevocationStore,
    check_secret_point,
)
from .tweak import (
    derive_public_key,
    derive_private_key,
    derive_revocation_pubkey,
    derive_revocation_privkey,
    CommitmentKeys,
)
from .obscured import (
    obscure_factor,
    obscure_commitment_number,
    reveal_commitment_number,
    locktime_and_sequence,
    commitment_number_from_tx,
)
from .scripts import (
    funding_script,
    funding_address,
    p2wsh,
    p2wpkh,
    to_local_script,
    to_remote_script,
    offered_htlc_script,
    received_htlc_script,
)
from .fees import (
    commitment_fee,
    htlc_timeout_fee,
    htlc_success_fee,
    is_offered_htlc_dust,
    is_received_htlc_dust,
)
from .funding import Funding, create_funding_transaction
from .commit_tx import (
    HTLCDirection,
    HTLCOutput,
    OutputWithMetadata,
    sort_outputs,
    Commitment,
    build_commitment_transaction,
    commitment_from_channel_keys,
    build_commitment_from_channel_keys,
)
from .htlc_tx import create_htlc_timeout_tx, create_htlc_success_tx
from .signature import sign_input, verify_input_signature
from .witness import (
    with_witness,
    funding_witness,
    to_local_revocation_witness,
    to_local_delayed_witness,
    htlc_timeout_witness,
    htlc_success_witness,
    finalize_holder_commitment,
    finalize_htlc_timeout,
    finalize_htlc_success,
)

__all__ = [
    "Bolt3Error",
    "InvalidInputError",
    "CryptoImpossibilityError",
    "ProtocolViolationError",
    "Side",
    "MAX_COMMITMENT_NUMBER",
    "chainparams",
    "ChannelConfig",
    "KeyFamily",
    "ExtendedKey",
    "KeysManager",
    "FundingKeyProvider",
    "DerivedFundingKeyProvider",
    "StaticFundingKeyProvider",
    "derive_basepoint_secret",
    "derive_channel_key_material",
    "ChannelKeyMaterial",
    "ChannelPublicKeys",
    "build_commitment_secret",
    "derive_per_commitment_point",
    "commitment_number_to_index",
    "index_to_commitment_number",
    "RevocationStore",
    "check_secret_point",
    "derive_public_key",
    "derive_private_key",
    "derive_revocation_pubkey",
    "derive_revocation_privkey",
    "CommitmentKeys",
    "obscure_factor",
    "obscure_commitment_number",
    "reveal_commitment_number",
    "locktime_and_sequence",
    "commitment_number_from_tx",
    "funding_script",
    "funding_address",
    "p2wsh",
    "p2wpkh",
    "to_local_script",
    "to_remote_script",
    "offered_htlc_script",
    "received_htlc_script",
    "commitment_fee",
    "htlc_timeout_fee",
    "htlc_success_fee",
    "is_offered_htlc_dust",
    "is_received_htlc_dust",
    "Funding",
    "create_funding_transaction",
    "HTLCDirection",
    "HTLCOutput",
    "OutputWithMetadata",
    "sort_outputs",
    "Commitment",
    "build_commitment_transaction",
    "commitment_from_channel_keys",
    "build_commitment_from_channel_keys",
    "create_htlc_timeout_tx",
    "create_htlc_success_tx",
    "sign_input",
    "verify_input_signature",
    "with_witness",
    "funding_witness",
    "to_local_revocation_witness",
    "to_local_delayed_witness",
    "htlc_timeout_witness",
    "htlc_success_witness",
    "finalize_holder_commitment",
    "finalize_htlc_timeout",
    "finalize_htlc_success",
]
