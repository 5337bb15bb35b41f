"""Per-call result values of encryption and decryption."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EncryptResult:
    """Whether an encryption succeeded and how many plaintext bytes it covered."""

    is_valid: bool = False
    num_bytes_encrypted: int = 0

    @classmethod
    def success(cls, num_bytes: int) -> "EncryptResult":
        return cls(is_valid=True, num_bytes_encrypted=num_bytes)


@dataclass(frozen=True)
class DecryptResult:
    """
    Decryption result.

    A default instance is invalid. Recoverable problems such as a key that
    does not match the ciphertext, or an output buffer of the wrong length,
    are reported with is_valid=False instead of an exception.

    scaling_factor_int is only meaningful for schemes with fixed-point
    integer scaling; it defaults to the multiplicative identity.
    """

    is_valid: bool = False
    message_length: int = 0
    scaling_factor_int: int = 1

    @classmethod
    def success(cls, message_length: int, scaling_factor_int: int = 1) -> "DecryptResult":
        return cls(is_valid=True, message_length=message_length, scaling_factor_int=scaling_factor_int)
