"""map decoded option literals to canonical vote options"""

from __future__ import annotations

from typing import Dict, Optional

from mvx_governance.hex_codec import hex_to_ascii
from mvx_governance.models import VoteOption

# veto has been emitted under three literals over the contract's history
OPTION_ALIASES: Dict[str, VoteOption] = {
    "yes": VoteOption.YES,
    "no": VoteOption.NO,
    "abstain": VoteOption.ABSTAIN,
    "veto": VoteOption.VETO,
    "ncv": VoteOption.VETO,
    "veto_power": VoteOption.VETO,
}


def decode_option(hex_str: Optional[str]) -> VoteOption:
    """decode a hex option topic; anything unmapped is UNKNOWN"""
    return OPTION_ALIASES.get(hex_to_ascii(hex_str).lower(), VoteOption.UNKNOWN)


__all__ = ["OPTION_ALIASES", "decode_option"]
