from authlib.common.security import generate_token
from authlib.oauth2.rfc7636 import create_s256_code_challenge


def generate_state() -> str:
    return generate_token(32)


def generate_code_verifier() -> str:
    # valid PKCE range is 43-128 characters
    return generate_token(64)


def code_challenge_s256(verifier: str) -> str:
    return create_s256_code_challenge(verifier)
