from eth_keys import keys
from eth_typing.bls import BLSPubkey, BLSSignature
from py_ecc.bls import G2ProofOfPossession as bls_pop


def bls_verify(public_key: BLSPubkey, message: bytes, signature: BLSSignature) -> bool:
    """Malformed keys or signatures verify as False, they never raise."""
    return bls_pop.Verify(public_key, message, signature)


def aggregate_bls_signatures(signatures: list[BLSSignature]) -> BLSSignature:
    """
    Plain G2 point addition of signatures over the same message.
    Unlike Lagrange reconstruction, every input must already be a complete signature.
    """
    return bls_pop.Aggregate(signatures)


def ecdsa_verify(public_key: keys.PublicKey, message_hash: bytes, signature: bytes) -> bool:
    """
    Verifies a secp256k1 `r || s` signature over a 32-byte digest.
    The digest is used as-is, it is not hashed again.
    """
    r = int.from_bytes(signature[:32], 'big')
    s = int.from_bytes(signature[32:64], 'big')
    # recovery id does not take part in verification
    return public_key.verify_msg_hash(message_hash, keys.Signature(vrs=(0, r, s)))
