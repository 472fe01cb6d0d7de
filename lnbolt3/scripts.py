#! /usr/bin/python3
import coincurve
from typing import Tuple
from bitcoin.core import Hash160
import bitcoin.core.script as script
from bitcoin.core.script import CScript
from pyln.proto import bech32
from .chainparams import chainparams
from .errors import InvalidInputError
from .utils import check_bytes, ripemd160, sha256


def sort_by_keys(
    key_one: coincurve.PublicKey, key_two: coincurve.PublicKey
) -> Tuple[coincurve.PublicKey, coincurve.PublicKey]:
    # BOLT #3:
    # * Where `pubkey1` is the lexicographically lesser of the two
    #   `funding_pubkey` in compressed format, and where `pubkey2` is the
    #   lexicographically greater of the two.
    if key_one.format() < key_two.format():
        return key_one, key_two
    return key_two, key_one


def funding_script(
    key_one: coincurve.PublicKey, key_two: coincurve.PublicKey
) -> CScript:
    # BOLT #3:
    # ## Funding Transaction Output
    #
    # * The funding output script is a P2WSH to: `2 <pubkey1> <pubkey2> 2
    #  OP_CHECKMULTISIG`
    return CScript(
        [script.OP_2]
        + [k.format() for k in sort_by_keys(key_one, key_two)]
        + [script.OP_2, script.OP_CHECKMULTISIG]
    )


def p2wsh(witness_script: CScript) -> CScript:
    return CScript([script.OP_0, sha256(witness_script)])


def p2wpkh(pubkey: coincurve.PublicKey) -> CScript:
    return CScript([script.OP_0, Hash160(pubkey.format())])


def segwit_address(locking_script: CScript, network: str) -> str:
    """bech32 address for a v0 witness program"""
    raw = bytes(locking_script)
    if len(raw) not in (22, 34) or raw[0] != 0 or raw[1] != len(raw) - 2:
        raise InvalidInputError("{} is not a v0 witness program".format(raw.hex()))
    data = bytes([0] + bech32.convertbits(raw[2:], 8, 5))
    return bech32.bech32_encode(chainparams(network)["bip173_prefix"], data)


def funding_address(
    key_one: coincurve.PublicKey, key_two: coincurve.PublicKey, network: str
) -> str:
    return segwit_address(p2wsh(funding_script(key_one, key_two)), network)


def to_local_script(
    revocation_pubkey: coincurve.PublicKey,
    to_self_delay: int,
    local_delayed_pubkey: coincurve.PublicKey,
) -> CScript:
    # BOLT #3:
    # #### `to_local` Output
    #
    # This output sends funds back to the owner of this commitment
    # transaction and thus must be timelocked using
    # `OP_CHECKSEQUENCEVERIFY`. It can be claimed, without delay, by the
    # other party if they know the revocation private key. The output is a
    # version-0 P2WSH, with a witness script:
    #
    #     OP_IF
    #         # Penalty transaction
    #         <revocationpubkey>
    #     OP_ELSE
    #         `to_self_delay`
    #         OP_CHECKSEQUENCEVERIFY
    #         OP_DROP
    #         <local_delayedpubkey>
    #     OP_ENDIF
    #     OP_CHECKSIG
    return CScript(
        [
            script.OP_IF,
            revocation_pubkey.format(),
            script.OP_ELSE,
            to_self_delay,
            script.OP_CHECKSEQUENCEVERIFY,
            script.OP_DROP,
            local_delayed_pubkey.format(),
            script.OP_ENDIF,
            script.OP_CHECKSIG,
        ]
    )


def to_remote_script(remote_payment_basepoint: coincurve.PublicKey) -> CScript:
    # BOLT #3:
    # #### `to_remote` Output
    #
    # This output sends funds to the other peer and thus is a simple
    # P2WPKH to `remotepubkey`.
    # ...
    # If `option_static_remotekey` is negotiated the `remotepubkey` is
    # simply the remote node's `payment_basepoint`.
    return p2wpkh(remote_payment_basepoint)


def offered_htlc_script(
    revocation_pubkey: coincurve.PublicKey,
    local_htlc_pubkey: coincurve.PublicKey,
    remote_htlc_pubkey: coincurve.PublicKey,
    payment_hash: bytes,
) -> CScript:
    # BOLT #3: This output sends funds to either an HTLC-timeout
    # transaction after the HTLC-timeout or to the remote node
    # using the payment preimage or the revocation key. The output
    # is a P2WSH, with a witness script:
    #
    # # To remote node with revocation key
    # OP_DUP OP_HASH160 <RIPEMD160(SHA256(revocationpubkey))> OP_EQUAL
    # OP_IF
    #     OP_CHECKSIG
    # OP_ELSE
    #     <remote_htlcpubkey> OP_SWAP OP_SIZE 32 OP_EQUAL
    #     OP_NOTIF
    #         # To local node via HTLC-timeout transaction (timelocked).
    #         OP_DROP 2 OP_SWAP <local_htlcpubkey> 2 OP_CHECKMULTISIG
    #     OP_ELSE
    #         # To remote node with preimage.
    #         OP_HASH160 <RIPEMD160(payment_hash)> OP_EQUALVERIFY
    #         OP_CHECKSIG
    #     OP_ENDIF
    # OP_ENDIF
    check_bytes(payment_hash, 32, "payment hash")
    return CScript(
        [
            script.OP_DUP,
            script.OP_HASH160,
            Hash160(revocation_pubkey.format()),
            script.OP_EQUAL,
            script.OP_IF,
            script.OP_CHECKSIG,
            script.OP_ELSE,
            remote_htlc_pubkey.format(),
            script.OP_SWAP,
            script.OP_SIZE,
            32,
            script.OP_EQUAL,
            script.OP_NOTIF,
            script.OP_DROP,
            2,
            script.OP_SWAP,
            local_htlc_pubkey.format(),
            2,
            script.OP_CHECKMULTISIG,
            script.OP_ELSE,
            script.OP_HASH160,
            ripemd160(payment_hash),
            script.OP_EQUALVERIFY,
            script.OP_CHECKSIG,
            script.OP_ENDIF,
            script.OP_ENDIF,
        ]
    )


def received_htlc_script(
    revocation_pubkey: coincurve.PublicKey,
    local_htlc_pubkey: coincurve.PublicKey,
    remote_htlc_pubkey: coincurve.PublicKey,
    payment_hash: bytes,
    cltv_expiry: int,
) -> CScript:
    # BOLT #3:
    # This output sends funds to either the remote node after the
    # HTLC-timeout or using the revocation key, or to an HTLC-success
    # transaction with a successful payment preimage. The output is a
    # P2WSH, with a witness script:
    #
    # # To remote node with revocation key
    # OP_DUP OP_HASH160 <RIPEMD160(SHA256(revocationpubkey))> OP_EQUAL
    # OP_IF
    #     OP_CHECKSIG
    # OP_ELSE
    #     <remote_htlcpubkey> OP_SWAP OP_SIZE 32 OP_EQUAL
    #     OP_IF
    #         # To local node via HTLC-success transaction.
    #         OP_HASH160 <RIPEMD160(payment_hash)> OP_EQUALVERIFY
    #         2 OP_SWAP <local_htlcpubkey> 2 OP_CHECKMULTISIG
    #     OP_ELSE
    #         # To remote node after timeout.
    #         OP_DROP <cltv_expiry> OP_CHECKLOCKTIMEVERIFY OP_DROP
    #         OP_CHECKSIG
    #     OP_ENDIF
    # OP_ENDIF
    check_bytes(payment_hash, 32, "payment hash")
    return CScript(
        [
            script.OP_DUP,
            script.OP_HASH160,
            Hash160(revocation_pubkey.format()),
            script.OP_EQUAL,
            script.OP_IF,
            script.OP_CHECKSIG,
            script.OP_ELSE,
            remote_htlc_pubkey.format(),
            script.OP_SWAP,
            script.OP_SIZE,
            32,
            script.OP_EQUAL,
            script.OP_IF,
            script.OP_HASH160,
            ripemd160(payment_hash),
            script.OP_EQUALVERIFY,
            2,
            script.OP_SWAP,
            local_htlc_pubkey.format(),
            2,
            script.OP_CHECKMULTISIG,
            script.OP_ELSE,
            script.OP_DROP,
            cltv_expiry,
            script.OP_CHECKLOCKTIMEVERIFY,
            script.OP_DROP,
            script.OP_CHECKSIG,
            script.OP_ENDIF,
            script.OP_ENDIF,
        ]
    )
