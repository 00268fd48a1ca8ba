import base64, os
from functools import lru_cache
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from common.errors import EncryptionError
from common.log import get_logger

log = get_logger(__name__)

AES_KEY_SIZE = 16   # AES-128
IV_SIZE = 16
BLOCK_BITS = 128

# BUFF's RSA-4096 public key (DER/SPKI, base64). The service decrypts seller_info with it.
BUFF_PUBLIC_KEY = """MIICIjANBgkqhkiG9w0BAQEFAAOCAg8AMIICCgKCAgEArF75iD8PXTT+B5nAnnhw
qxg9I48t9uED7r6GuRcPYUZ0Ye3Vdvs71CVjuELyxALtj5cN+Pe1DwDSUAH1TF+9
dS7769gcJaMMdgEB6vyssm9fnPKB4KXqbUHdMT1MF2tylemDlqfsfpkV91wtAhHf
SkNtsQcPw4Juhn0IK+2xyvlm6HtXqFOkhial5T+miGBJk3snHfLPmQFsg/3EuHFM
tBzoLX29C46SNv/W33dwOk3mgIP1SMy4TLmm8CuyNiCuHPum53Q3RXSGrpR2nJps
4ICIWb0P3VZmPhCrDK1iWwwtVGj9jDkCT2zh+B18j26vfTkBDdac5s4sw739uAha
bH56BQflowPICHVWtptCEnORewxo/FDhFUtn4sjiQswgnTHJ6F/q0vwegRRsx0AT
f3SvpksR6dZuUqHzISthooQ/68PrJ8VaKfT17u43pif08/bFkZAkYdLev4Mk0SlZ
YOqpRoif+7Pi0yObTZ0bgpCwDb1kgAmqCHi9pFPS/LUMVqSqMa4maxAX2A8a/cbl
CJbjBHLn0zrZn3YW4hKlaVvGFG/Mmag+ALV5xII0y6JSoqdxlxpyhEmbOi/GCFMw
0Mn6lyvYDCvYVwS7UqLMw7NU3WXhbNUh8DgBSb5jo4yY9E42d24JiumZulzkSdgy
OSkVea8JGUUD8PliMtRJOQkCAwEAAQ=="""

PublicKeyLike = Union[str, bytes, rsa.RSAPublicKey]


def rsa_generate(bits: int = 2048) -> rsa.RSAPrivateKey:
    '''
    The function generates an RSA private key.
        Input: key size in bits (default 2048)
        Output: private key object
    '''
    return rsa.generate_private_key(public_exponent=65537, key_size=bits)

def rsa_public_der_b64(priv: rsa.RSAPrivateKey) -> str:
    '''
    The function returns the public half of a private key in the same
    base64 DER/SPKI form as BUFF_PUBLIC_KEY.
    '''
    der = priv.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return b64(der)

@lru_cache(maxsize=None)
def _load_text_key(material: str) -> rsa.RSAPublicKey:
    try:
        if "-----BEGIN" in material:
            key = serialization.load_pem_public_key(material.encode())
        else:
            # base64 may be wrapped over several lines
            der = base64.b64decode("".join(material.split()), validate=True)
            key = serialization.load_der_public_key(der)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise EncryptionError(f"cannot load RSA public key: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise EncryptionError(f"expected an RSA public key, got {type(key).__name__}")
    return key

def load_public_key(material: PublicKeyLike) -> rsa.RSAPublicKey:
    '''
    This function turns the key material into an RSA public key object.
    Input:
        - material: base64 DER/SPKI text, PEM text (str or bytes) or an RSA key object
    Output: RSA public key object; text keys are parsed once and cached
    '''
    if isinstance(material, rsa.RSAPublicKey):
        return material
    if isinstance(material, bytes):
        try:
            material = material.decode("ascii")
        except UnicodeDecodeError as e:
            raise EncryptionError("public key text is not ASCII") from e
    if not isinstance(material, str):
        raise EncryptionError(f"unsupported public key type: {type(material).__name__}")
    return _load_text_key(material)

def seal(plaintext: Union[str, bytes], public_key: PublicKeyLike = BUFF_PUBLIC_KEY) -> str:
    '''
    This function builds the RSA+AES envelope that the marketplace expects for seller_info.
    A fresh AES-128 key and IV are drawn for every call; the key is wrapped with
    RSA PKCS#1 v1.5 and the content is encrypted with AES-128-CBC + PKCS#7.
    Input:
        - plaintext: content to protect (str is encoded as UTF-8)
        - public_key: recipient's RSA public key (defaults to BUFF_PUBLIC_KEY)
    Output: base64 string of wrapped_key || iv || ciphertext
    '''
    pub = load_public_key(public_key)
    try:
        data = plaintext.encode("utf-8") if isinstance(plaintext, str) else bytes(plaintext)
        aes_key = os.urandom(AES_KEY_SIZE)
        iv = os.urandom(IV_SIZE)
        wrapped = pub.encrypt(aes_key, padding.PKCS1v15())

        padder = sym_padding.PKCS7(BLOCK_BITS).padder()
        padded = padder.update(data) + padder.finalize()
        encryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).encryptor()
        ct = encryptor.update(padded) + encryptor.finalize()
    except (ValueError, TypeError, UnicodeError, UnsupportedAlgorithm) as e:
        raise EncryptionError(f"encryption failed: {e}") from e

    blob = wrapped + iv + ct
    log.debug("sealed %d bytes: wrapped key %d, iv %d, ciphertext %d",
              len(data), len(wrapped), len(iv), len(ct))
    return b64(blob)

def open_envelope(priv: rsa.RSAPrivateKey, envelope_b64: str) -> bytes:
    '''
    This function reverses seal() with the recipient's RSA private key.
    Input:
        - priv: RSA private key matching the key used to seal
        - envelope_b64: base64 string produced by seal()
    Output: the original plaintext bytes
    '''
    try:
        blob = b64d(envelope_b64)
        k = priv.key_size // 8
        if len(blob) < k + IV_SIZE + IV_SIZE:
            raise ValueError(f"envelope too short: {len(blob)} bytes")
        wrapped, iv, ct = blob[:k], blob[k:k + IV_SIZE], blob[k + IV_SIZE:]
        aes_key = priv.decrypt(wrapped, padding.PKCS1v15())

        decryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ct) + decryptor.finalize()
        unpadder = sym_padding.PKCS7(BLOCK_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except (ValueError, TypeError) as e:
        raise EncryptionError(f"decryption failed: {e}") from e

def b64(b: bytes) -> str:
    ''' This function encodes bytes to a Base64 string '''
    return base64.b64encode(b).decode()

def b64d(s: str) -> bytes:
    ''' This function decodes a Base64 string to bytes '''
    return base64.b64decode(s.encode())
