#! /usr/bin/python3
import coincurve
from coincurve.context import Context, GLOBAL_CONTEXT
from .errors import CryptoImpossibilityError
from .utils import sha256


def _tweak(
    per_commitment_point: coincurve.PublicKey, basepoint: coincurve.PublicKey
) -> bytes:
    return sha256(per_commitment_point.format() + basepoint.format())


def derive_public_key(
    basepoint: coincurve.PublicKey,
    per_commitment_point: coincurve.PublicKey,
    context: Context = GLOBAL_CONTEXT,
) -> coincurve.PublicKey:
    # BOLT #3:
    # ### `localpubkey`, `local_htlcpubkey`, `remote_htlcpubkey`,
    #  `local_delayedpubkey`, and `remote_delayedpubkey` Derivation
    # ...
    #    pubkey = basepoint + SHA256(per_commitment_point || basepoint) * G
    try:
        return coincurve.PublicKey(basepoint.format(), context).add(
            _tweak(per_commitment_point, basepoint), update=False
        )
    except ValueError:
        raise CryptoImpossibilityError(
            "tweaking {} gave an invalid point".format(basepoint.format().hex())
        )


def derive_private_key(
    basepoint_secret: coincurve.PrivateKey,
    per_commitment_point: coincurve.PublicKey,
    context: Context = GLOBAL_CONTEXT,
) -> coincurve.PrivateKey:
    # BOLT #3:
    # The corresponding private keys can be similarly derived, if the
    # basepoint secrets are known (i.e. the private keys corresponding to
    # `localpubkey`, `local_htlcpubkey`, and `local_delayedpubkey` only):
    #
    #    privkey = basepoint_secret + SHA256(per_commitment_point || basepoint)
    basepoint = coincurve.PublicKey.from_secret(basepoint_secret.secret, context)
    try:
        return coincurve.PrivateKey(basepoint_secret.secret, context).add(
            _tweak(per_commitment_point, basepoint), update=False
        )
    except ValueError:
        raise CryptoImpossibilityError("tweaked private key is invalid")


def derive_revocation_pubkey(
    revocation_basepoint: coincurve.PublicKey,
    per_commitment_point: coincurve.PublicKey,
    context: Context = GLOBAL_CONTEXT,
) -> coincurve.PublicKey:
    # BOLT #3:
    # The `revocationpubkey` is a blinded key: when the local node wishes
    # to create a new commitment for the remote node, it uses its own
    # `revocation_basepoint` and the remote node's `per_commitment_point`
    # to derive a new `revocationpubkey` for the commitment.
    # ...
    #    revocationpubkey = revocation_basepoint * SHA256(revocation_basepoint || per_commitment_point) + per_commitment_point * SHA256(per_commitment_point || revocation_basepoint)
    revocation_tweak = sha256(
        revocation_basepoint.format() + per_commitment_point.format()
    )
    per_commit_tweak = sha256(
        per_commitment_point.format() + revocation_basepoint.format()
    )
    try:
        val = coincurve.PublicKey(revocation_basepoint.format(), context).multiply(
            revocation_tweak, update=False
        )
        val2 = coincurve.PublicKey(per_commitment_point.format(), context).multiply(
            per_commit_tweak, update=False
        )
        return coincurve.PublicKey.combine_keys([val, val2], context)
    except ValueError:
        raise CryptoImpossibilityError("revocation pubkey is the point at infinity")


def derive_revocation_privkey(
    revocation_basepoint_secret: coincurve.PrivateKey,
    per_commitment_secret: coincurve.PrivateKey,
    context: Context = GLOBAL_CONTEXT,
) -> coincurve.PrivateKey:
    """Only computable once the holder has revealed per_commitment_secret"""
    # BOLT #3:
    #    revocationprivkey = revocation_basepoint_secret * SHA256(revocation_basepoint || per_commitment_point)
    #      + per_commitment_secret * SHA256(per_commitment_point || revocation_basepoint)
    revocation_basepoint = coincurve.PublicKey.from_secret(
        revocation_basepoint_secret.secret, context
    )
    per_commitment_point = coincurve.PublicKey.from_secret(
        per_commitment_secret.secret, context
    )
    revocation_tweak = sha256(
        revocation_basepoint.format() + per_commitment_point.format()
    )
    per_commit_tweak = sha256(
        per_commitment_point.format() + revocation_basepoint.format()
    )
    try:
        val = coincurve.PrivateKey(revocation_basepoint_secret.secret, context).multiply(
            revocation_tweak, update=False
        )
        val2 = coincurve.PrivateKey(per_commitment_secret.secret, context).multiply(
            per_commit_tweak, update=False
        )
        return val.add(val2.secret, update=False)
    except ValueError:
        raise CryptoImpossibilityError("revocation privkey is zero")


class CommitmentKeys(object):
    """The keys used in one commitment transaction, from the holder's view.

    local_* keys belong to the commitment's holder, remote_htlc_key to its
    counterparty; revocation_key is spendable by the counterparty once the
    holder reveals the per-commitment secret.
    """

    def __init__(
        self,
        per_commitment_point: coincurve.PublicKey,
        revocation_key: coincurve.PublicKey,
        local_delayed_payment_key: coincurve.PublicKey,
        local_htlc_key: coincurve.PublicKey,
        remote_htlc_key: coincurve.PublicKey,
    ):
        self.per_commitment_point = per_commitment_point
        self.revocation_key = revocation_key
        self.local_delayed_payment_key = local_delayed_payment_key
        self.local_htlc_key = local_htlc_key
        self.remote_htlc_key = remote_htlc_key

    @staticmethod
    def from_keys(
        per_commitment_point: coincurve.PublicKey,
        revocation_key: coincurve.PublicKey,
        local_delayed_payment_key: coincurve.PublicKey,
        local_htlc_key: coincurve.PublicKey,
        remote_htlc_key: coincurve.PublicKey,
    ) -> "CommitmentKeys":
        """Use keys that were derived elsewhere"""
        return CommitmentKeys(
            per_commitment_point,
            revocation_key,
            local_delayed_payment_key,
            local_htlc_key,
            remote_htlc_key,
        )

    @staticmethod
    def from_basepoints(
        per_commitment_point: coincurve.PublicKey,
        local_delayed_payment_basepoint: coincurve.PublicKey,
        local_htlc_basepoint: coincurve.PublicKey,
        remote_revocation_basepoint: coincurve.PublicKey,
        remote_htlc_basepoint: coincurve.PublicKey,
        context: Context = GLOBAL_CONTEXT,
    ) -> "CommitmentKeys":
        return CommitmentKeys(
            per_commitment_point,
            derive_revocation_pubkey(
                remote_revocation_basepoint, per_commitment_point, context
            ),
            derive_public_key(
                local_delayed_payment_basepoint, per_commitment_point, context
            ),
            derive_public_key(local_htlc_basepoint, per_commitment_point, context),
            derive_public_key(remote_htlc_basepoint, per_commitment_point, context),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommitmentKeys):
            return NotImplemented
        return all(
            getattr(self, k).format() == getattr(other, k).format()
            for k in (
                "per_commitment_point",
                "revocation_key",
                "local_delayed_payment_key",
                "local_htlc_key",
                "remote_htlc_key",
            )
        )
