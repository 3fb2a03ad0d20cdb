"""
RMB Amount — capitalized numerals (人民币大写金额) for bills and vouchers.

Architecture: Lexicon → Encoder / Decoder → Rule checks → Cross-check pipeline
Philosophy:  Every 零 is load-bearing. A written amount that leaves room for
             an extra digit is rejected, not repaired.
"""

from .decoder import decode
from .encoder import encode
from .validators import check_amount_rules, validate

__version__ = "1.0.0"

__all__ = ["check_amount_rules", "decode", "encode", "validate"]
