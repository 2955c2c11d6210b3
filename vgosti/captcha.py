# vgosti/captcha.py
"""
Arithmetic spam challenge for the review form.

The answer never reaches the page in clear text: only its keyed digest
travels in a short-lived signed token next to the form, so checking a
submission needs no server-side state.
"""

import hashlib
import hmac
import random
from dataclasses import dataclass
from typing import Optional

from vgosti import auth
from vgosti.config import settings

OPERATORS = ("+", "-", "*")
OPERATOR_SYMBOLS = {"+": "+", "-": "−", "*": "×"}
CAPTCHA_SUBJECT = "captcha"


@dataclass(frozen=True)
class Challenge:
    left: int
    operator: str
    right: int

    @property
    def answer(self) -> int:
        if self.operator == "+":
            return self.left + self.right
        if self.operator == "-":
            return self.left - self.right
        if self.operator == "*":
            return self.left * self.right
        raise ValueError(f"Unknown operator {self.operator!r}")

    @property
    def question(self) -> str:
        return f"{self.left} {OPERATOR_SYMBOLS[self.operator]} {self.right}"


def generate_challenge(rng: Optional[random.Random] = None) -> Challenge:
    rng = rng or random.SystemRandom()
    operator = rng.choice(OPERATORS)
    if operator == "+":
        return Challenge(rng.randint(1, 20), operator, rng.randint(1, 20))
    if operator == "-":
        # minuend 10..39 never drops below subtrahend 1..10
        return Challenge(rng.randint(10, 39), operator, rng.randint(1, 10))
    return Challenge(rng.randint(1, 10), operator, rng.randint(1, 10))


def issue_token(challenge: Challenge) -> str:
    return auth.create_access_token(
        {"sub": CAPTCHA_SUBJECT, "answer": answer_digest(challenge.answer)},
        expires_minutes=settings.CAPTCHA_EXPIRE_MINUTES,
    )


def answer_digest(answer) -> str:
    key = settings.JWT_SECRET_KEY.encode()
    return hmac.new(key, str(answer).strip().encode(), hashlib.sha256).hexdigest()


def check_answer(expected_digest: str, given: Optional[str]) -> bool:
    return hmac.compare_digest(answer_digest(given or ""), expected_digest)


def verify_challenge(token: Optional[str], given: Optional[str]) -> bool:
    """False for a wrong answer as well as for a missing, forged or expired token."""
    if not token:
        return False
    payload = auth.decode_token(token)
    if not payload or payload.get("sub") != CAPTCHA_SUBJECT:
        return False
    return check_answer(str(payload.get("answer", "")), given)
