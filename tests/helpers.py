#! /usr/bin/python3
import coincurve
from hashlib import sha256
from typing import List
from bitcoin.core import CTransaction, COutPoint, lx
from lnbolt3 import (
    ChannelConfig,
    Commitment,
    CommitmentKeys,
    Funding,
    HTLCDirection,
    HTLCOutput,
)


def privkey(secret: str) -> coincurve.PrivateKey:
    return coincurve.PrivateKey(bytes.fromhex(secret))


def pubkey(hexstr: str) -> coincurve.PublicKey:
    return coincurve.PublicKey(bytes.fromhex(hexstr))


# BOLT #3:
# ## Appendix C: Commitment and HTLC Transaction Test Vectors
#
#     funding_tx_id: 8984484a580b825b9972d7adb15050b3ab624ccd731946b3eeddb92f4e7ef6be
#     funding_output_index: 0
#     funding_amount_satoshi: 10000000
#     commitment_number: 42
#     local_delay: 144
#     local_dust_limit_satoshi: 546
funding_txid = "8984484a580b825b9972d7adb15050b3ab624ccd731946b3eeddb92f4e7ef6be"
funding_amount = 10000000
commitment_number = 42

local_funding_privkey = privkey(
    "30ff4956bbdd3222d44cc5e8a1261dab1e07957bdac5ae88fe3261ef321f3749"
)
remote_funding_privkey = privkey(
    "1552dfba4f6cf29a62a0af13c8d6981d36d0ef8d61ba10fb0fe90da7634d7e13"
)
local_funding_pubkey = pubkey(
    "023da092f6980e58d2c037173180e9a465476026ee50f96695963e8efe436f54eb"
)
remote_funding_pubkey = pubkey(
    "030e9f7b623d2ccc7c9bd44d66d5ce21ce504c0acf6385a132cec6d3c39fa711c1"
)
funding_witness_script = "5221023da092f6980e58d2c037173180e9a465476026ee50f96695963e8efe436f54eb21030e9f7b623d2ccc7c9bd44d66d5ce21ce504c0acf6385a132cec6d3c39fa711c152ae"

# INTERNAL: local_payment_basepoint_secret: 111111111111111111111111111111111111111111111111111111111111111101
# INTERNAL: local_delayed_payment_basepoint_secret: 333333333333333333333333333333333333333333333333333333333333333301
# INTERNAL: remote_revocation_basepoint_secret: 222222222222222222222222222222222222222222222222222222222222222201
# INTERNAL: remote_payment_basepoint_secret: 444444444444444444444444444444444444444444444444444444444444444401
# x_local_per_commitment_secret: 1f1e1d1c1b1a191817161514131211100f0e0d0c0b0a0908070605040302010001
local_payment_basepoint_secret = privkey("11" * 32)
local_delayed_payment_basepoint_secret = privkey("33" * 32)
remote_revocation_basepoint_secret = privkey("22" * 32)
remote_payment_basepoint_secret = privkey("44" * 32)
per_commitment_secret = privkey(
    "1f1e1d1c1b1a191817161514131211100f0e0d0c0b0a09080706050403020100"
)

# From BOLT 3 Appendix C, the local and remote htlc basepoints equal the
# payment basepoints.
local_payment_basepoint = pubkey(
    "034f355bdcb7cc0af728ef3cceb9615d90684bb5b2ca5f859ab0f0b704075871aa"
)
remote_payment_basepoint = pubkey(
    "032c0b7cf95324a07d05398b240174dc0c2be444d96b159aa6c7f7b1e668680991"
)
per_commitment_point = pubkey(
    "025f7117a78150fe2ef97db7cfc83bd57b2e2c0d0dd25eaf467a4a1c2a45ce1486"
)

# local_delayedpubkey: 03fd5960528dc152014952efdb702a88f71e3c1653b2314431701ec77e57fde83c
# local_revocation_pubkey: 0212a140cd0c6539d07cd08dfe09984dec3251ea808b892efeac3ede9402bf2b19
# local_htlcpubkey: 030d417a46946384f88d5f3337267c5e579765875dc4daca813e21734b140639e7
# remote_htlcpubkey: 0394854aa6eab5b2a8122cc726e9dded053a2184d88256816826d6231c068d4a5b
local_delayedpubkey = pubkey(
    "03fd5960528dc152014952efdb702a88f71e3c1653b2314431701ec77e57fde83c"
)
local_revocation_pubkey = pubkey(
    "0212a140cd0c6539d07cd08dfe09984dec3251ea808b892efeac3ede9402bf2b19"
)
local_htlcpubkey = pubkey(
    "030d417a46946384f88d5f3337267c5e579765875dc4daca813e21734b140639e7"
)
remote_htlcpubkey = pubkey(
    "0394854aa6eab5b2a8122cc726e9dded053a2184d88256816826d6231c068d4a5b"
)

to_local_witness_script = "63210212a140cd0c6539d07cd08dfe09984dec3251ea808b892efeac3ede9402bf2b1967029000b2752103fd5960528dc152014952efdb702a88f71e3c1653b2314431701ec77e57fde83c68ac"


def bolt3_funding() -> Funding:
    return Funding(
        funding_txid, 0, funding_amount, local_funding_pubkey, remote_funding_pubkey
    )


def bolt3_outpoint() -> COutPoint:
    return COutPoint(lx(funding_txid), 0)


def bolt3_keys() -> CommitmentKeys:
    """Derive the vector's keys; local htlc basepoint == payment basepoint"""
    return CommitmentKeys.from_basepoints(
        per_commitment_point,
        coincurve.PublicKey.from_secret(local_delayed_payment_basepoint_secret.secret),
        local_payment_basepoint,
        coincurve.PublicKey.from_secret(remote_revocation_basepoint_secret.secret),
        remote_payment_basepoint,
    )


def bolt3_htlcs() -> List[HTLCOutput]:
    # BOLT #3:
    #     htlc 0 direction: remote->local
    #     htlc 0 amount_msat: 1000000
    #     htlc 0 expiry: 500
    #     htlc 0 payment_preimage: 0000000000000000000000000000000000000000000000000000000000000000
    #     htlc 1 direction: remote->local
    #     htlc 1 amount_msat: 2000000
    #     htlc 1 expiry: 501
    #     htlc 1 payment_preimage: 0101010101010101010101010101010101010101010101010101010101010101
    #     htlc 2 direction: local->remote
    #     htlc 2 amount_msat: 2000000
    #     htlc 2 expiry: 502
    #     htlc 2 payment_preimage: 0202020202020202020202020202020202020202020202020202020202020202
    #     htlc 3 direction: local->remote
    #     htlc 3 amount_msat: 3000000
    #     htlc 3 expiry: 503
    #     htlc 3 payment_preimage: 0303030303030303030303030303030303030303030303030303030303030303
    #     htlc 4 direction: remote->local
    #     htlc 4 amount_msat: 4000000
    #     htlc 4 expiry: 504
    #     htlc 4 payment_preimage: 0404040404040404040404040404040404040404040404040404040404040404
    return [
        HTLCOutput.from_preimage(HTLCDirection.received, 1000000, bytes(32), 500),
        HTLCOutput.from_preimage(HTLCDirection.received, 2000000, bytes([1]) * 32, 501),
        HTLCOutput.from_preimage(HTLCDirection.offered, 2000000, bytes([2]) * 32, 502),
        HTLCOutput.from_preimage(HTLCDirection.offered, 3000000, bytes([3]) * 32, 503),
        HTLCOutput.from_preimage(HTLCDirection.received, 4000000, bytes([4]) * 32, 504),
    ]


def payment_hash(preimage_byte: int) -> bytes:
    return sha256(bytes([preimage_byte]) * 32).digest()


def bolt3_commitment(
    to_local_msat: int,
    to_remote_msat: int,
    feerate_per_kw: int,
    htlcs: List[HTLCOutput] = [],
) -> Commitment:
    return Commitment(
        bolt3_outpoint(),
        bolt3_keys(),
        local_payment_basepoint,
        remote_payment_basepoint,
        to_local_msat,
        to_remote_msat,
        commitment_number,
        ChannelConfig(
            to_self_delay=144, dust_limit_satoshis=546, feerate_per_kw=feerate_per_kw
        ),
        htlcs,
    )


def witness_stack(txhex: str) -> List[bytes]:
    tx = CTransaction.deserialize(bytes.fromhex(txhex))
    return list(tx.wit.vtxinwit[0].scriptWitness.stack)
